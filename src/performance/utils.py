"""Small numeric helpers shared by the calculators."""
from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value) -> int:
    """Round to the nearest integer, halves away from zero (``2.5 -> 3``)."""
    return int(_to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percent(part, whole) -> int:
    """``round(100 * part / whole)``, or 0 when ``whole`` is not positive."""
    whole = _to_decimal(whole)
    if whole <= 0:
        return 0
    return round_half_up(Decimal("100") * _to_decimal(part) / whole)


def ceil_div(numerator, denominator) -> int:
    """Exact ceiling of ``numerator / denominator`` for non-negative inputs."""
    quotient = _to_decimal(numerator) / _to_decimal(denominator)
    return int(quotient.to_integral_value(rounding=ROUND_CEILING))


def add_series(*series) -> list:
    """Element-wise sum of equally long sequences."""
    if not series:
        return []
    return [sum(values) for values in zip(*series, strict=True)]
