"""Three-bucket status classification (behind / at-risk / on-track).

Two interchangeable policies share the same ``classify(metrics)`` interface.
The caller picks one; nothing in the engine selects a policy implicitly.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass

from performance.exceptions import InvalidInput


class StatusLabel(str, enum.Enum):
    BEHIND = "behind"
    AT_RISK = "at_risk"
    ON_TRACK = "on_track"


@dataclass(frozen=True)
class ThresholdSet:
    """Cut points: ``value >= on_track`` is on track, ``value >= at_risk`` at risk."""

    name: str
    on_track: int
    at_risk: int

    def __post_init__(self):
        if self.at_risk > self.on_track:
            raise InvalidInput(
                f"Seuils incoherents pour {self.name}: {self.at_risk} > {self.on_track}."
            )


RETURN_INDEX_THRESHOLDS = ThresholdSet("return_index", on_track=66, at_risk=33)
ACHIEVEMENT_RATE_THRESHOLDS = ThresholdSet("achievement_rate", on_track=80, at_risk=50)

THRESHOLD_SETS = {
    RETURN_INDEX_THRESHOLDS.name: RETURN_INDEX_THRESHOLDS,
    ACHIEVEMENT_RATE_THRESHOLDS.name: ACHIEVEMENT_RATE_THRESHOLDS,
}


def classify_value(value, thresholds: ThresholdSet) -> StatusLabel:
    if value >= thresholds.on_track:
        return StatusLabel.ON_TRACK
    if value >= thresholds.at_risk:
        return StatusLabel.AT_RISK
    return StatusLabel.BEHIND


def classify_recency(current: int, previous: int, second_previous: int) -> StatusLabel:
    if current > 0 or previous > 0:
        return StatusLabel.ON_TRACK
    if second_previous > 0:
        return StatusLabel.AT_RISK
    return StatusLabel.BEHIND


class ThresholdPolicy:
    """Labels a metrics object by one of its percentage attributes."""

    name = "threshold"

    def __init__(self, thresholds: ThresholdSet, attribute: str | None = None) -> None:
        if thresholds is None:
            raise InvalidInput("Un jeu de seuils explicite est requis.")
        self.thresholds = thresholds
        self.attribute = attribute or thresholds.name

    def __repr__(self) -> str:
        return (
            f"ThresholdPolicy({self.attribute} vs {self.thresholds.name}: "
            f"{self.thresholds.on_track}/{self.thresholds.at_risk})"
        )

    def classify(self, metrics) -> StatusLabel:
        value = getattr(metrics, self.attribute, None)
        if value is None:
            raise InvalidInput(
                f"Indicateur {self.attribute!r} absent de {type(metrics).__name__}.",
                attribute=self.attribute,
            )
        return classify_value(value, self.thresholds)


class RecencyPolicy:
    """Labels a metrics object by its (current, previous, second previous) counts."""

    name = "recency"

    def __repr__(self) -> str:
        return "RecencyPolicy()"

    def classify(self, metrics) -> StatusLabel:
        current, previous, second_previous = metrics.recent_counts
        return classify_recency(current, previous, second_previous)


def get_policy(name: str, threshold_set: str | None = None, attribute: str = "return_index"):
    """Resolve a policy from request-level names (``recency`` / ``threshold``).

    ``attribute`` names the indicator being labeled; the threshold set only
    provides the cut points.
    """
    if name == RecencyPolicy.name:
        return RecencyPolicy()
    if name == ThresholdPolicy.name:
        thresholds = THRESHOLD_SETS.get(threshold_set or attribute)
        if thresholds is None:
            raise InvalidInput(f"Jeu de seuils inconnu: {threshold_set!r}.")
        return ThresholdPolicy(thresholds, attribute=attribute)
    raise InvalidInput(f"Politique de statut inconnue: {name!r}.")
