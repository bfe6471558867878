"""Plain record shapes consumed by the performance engine.

The engine never touches the ORM: services convert model rows into these
records so every calculation stays a pure function of its inputs.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Sequence

from performance.exceptions import InvalidInput

MONTHS_PER_YEAR = 12
VALID_FREQUENCIES = (1, 2)


@dataclass(frozen=True)
class HierarchyNodeRecord:
    """A delegate, supervisor or sales director with its parent edge."""

    id: Any
    supervisor_id: Any = None
    role: str = "DELEGATE"
    name: str = ""


@dataclass(frozen=True)
class VisitAssignmentRecord:
    id: Any
    delegate_id: Any
    doctor_id: Any
    monthly_frequency: int

    def __post_init__(self):
        if self.monthly_frequency not in VALID_FREQUENCIES:
            raise InvalidInput(
                f"Frequence mensuelle invalide: {self.monthly_frequency!r} (attendu 1 ou 2).",
                assignment_id=self.id,
            )


@dataclass(frozen=True)
class VisitEventRecord:
    id: Any
    assignment_id: Any
    date: date


@dataclass(frozen=True)
class SalesAssignmentRecord:
    id: Any
    delegate_id: Any
    product_id: Any
    year: int
    monthly_target: tuple
    monthly_achieved: tuple

    def __post_init__(self):
        # Normalise to tuples so records stay hashable and immutable.
        object.__setattr__(
            self, "monthly_target", validate_monthly_series(self.monthly_target, "monthly_target")
        )
        object.__setattr__(
            self, "monthly_achieved", validate_monthly_series(self.monthly_achieved, "monthly_achieved")
        )


def validate_monthly_series(values: Sequence, field_name: str = "values") -> tuple:
    """Return ``values`` as a 12-slot tuple, rejecting bad lengths and negatives."""
    if values is None or isinstance(values, (str, bytes)):
        raise InvalidInput(f"{field_name}: une serie de 12 valeurs est attendue.")
    try:
        series = tuple(values)
    except TypeError:
        raise InvalidInput(f"{field_name}: une serie de 12 valeurs est attendue.") from None
    if len(series) != MONTHS_PER_YEAR:
        raise InvalidInput(
            f"{field_name}: {len(series)} valeurs recues, 12 attendues.",
        )
    for index, value in enumerate(series):
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            raise InvalidInput(f"{field_name}[{index}]: valeur non numerique {value!r}.")
        if value < 0:
            raise InvalidInput(f"{field_name}[{index}]: valeur negative {value!r}.")
    return series