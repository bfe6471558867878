"""Visit activity metrics and Return Index for one delegate-doctor assignment.

Return Index = visits done year-to-date / visits expected year-to-date.
Expected visits follow the assignment's monthly frequency over the elapsed
months of the as-of year; whether the current month counts as elapsed is an
explicit caller choice (``include_current_month``, default True).
"""
from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Iterable

from performance.exceptions import InvalidInput
from performance.records import VisitAssignmentRecord, VisitEventRecord
from performance.status import StatusLabel
from performance.timewindow import TimeWindow
from performance.utils import percent


@dataclass(frozen=True)
class VisitActivity:
    """Visit metrics for one assignment, or pooled over many."""

    monthly_visit_counts: list[int]
    monthly_frequency: int
    visits_today: int
    ytd_visits: int
    expected_visits: int
    return_index: int
    can_record_today: bool
    monthly_target_met: bool
    recent_counts: tuple[int, int, int] = (0, 0, 0)
    assignment_count: int = 1
    assignment_id: Any = None
    status_label: StatusLabel | None = field(default=None)

    def with_status(self, policy) -> "VisitActivity":
        return replace(self, status_label=policy.classify(self))

    def as_dict(self) -> dict:
        data = asdict(self)
        data["recent_counts"] = list(self.recent_counts)
        data["status_label"] = self.status_label.value if self.status_label else None
        return data


def summarize_visits(
    monthly_visit_counts: list[int],
    monthly_frequency: int,
    *,
    visits_today: int = 0,
    include_current_month: bool = True,
    recent_counts: tuple[int, int, int] = (0, 0, 0),
    assignment_count: int = 1,
    assignment_id=None,
    can_record_today: bool | None = None,
) -> VisitActivity:
    """Derive the Return Index block from bucketed counts.

    ``monthly_visit_counts`` holds January..as-of month, so its length is the
    as-of month. ``monthly_frequency`` may be a pooled sum of frequencies.
    """
    month = len(monthly_visit_counts)
    if not 1 <= month <= 12:
        raise InvalidInput(f"{month} mois de comptage recus, 1..12 attendus.")
    if any(count < 0 for count in monthly_visit_counts):
        raise InvalidInput("Les comptages de visites ne peuvent pas etre negatifs.")

    elapsed_months = month if include_current_month else month - 1
    expected_visits = monthly_frequency * elapsed_months
    ytd_visits = sum(monthly_visit_counts)
    current_month_visits = monthly_visit_counts[month - 1]

    if can_record_today is None:
        can_record_today = visits_today == 0 and current_month_visits < monthly_frequency

    return VisitActivity(
        monthly_visit_counts=list(monthly_visit_counts),
        monthly_frequency=monthly_frequency,
        visits_today=visits_today,
        ytd_visits=ytd_visits,
        expected_visits=expected_visits,
        return_index=percent(ytd_visits, expected_visits),
        can_record_today=can_record_today,
        monthly_target_met=current_month_visits >= monthly_frequency,
        recent_counts=tuple(recent_counts),
        assignment_count=assignment_count,
        assignment_id=assignment_id,
    )


def bucket_events(events: Iterable[VisitEventRecord]) -> Counter:
    """Count events per ``(year, month)``."""
    return Counter((event.date.year, event.date.month) for event in events)


def compute_visit_activity(
    assignment: VisitAssignmentRecord,
    events: Iterable[VisitEventRecord],
    window: TimeWindow,
    *,
    include_current_month: bool = True,
) -> VisitActivity:
    """Compute visit metrics for ``assignment`` as of ``window``."""
    events = list(events)
    for event in events:
        if event.assignment_id != assignment.id:
            raise InvalidInput(
                "Visite rattachee a une autre affectation.",
                assignment_id=assignment.id,
                event_id=event.id,
            )

    per_month = bucket_events(events)
    year = window.year
    monthly = [per_month[(year, month)] for month in window.ytd_months(window.current_month())]
    recent = tuple(per_month[pair] for pair in window.recent_months(3))
    # A past-period window has no real "today" to report on.
    visits_today = sum(1 for event in events if event.date == window.today) if window.live else 0

    return summarize_visits(
        monthly,
        assignment.monthly_frequency,
        visits_today=visits_today,
        include_current_month=include_current_month,
        recent_counts=recent,
        assignment_id=assignment.id,
        can_record_today=None if window.live else False,
    )


def pool_visit_activities(
    activities: list[VisitActivity],
    month: int,
    *,
    include_current_month: bool = True,
) -> VisitActivity:
    """Sum raw counts across activities, then recompute the ratios once.

    Never averages per-assignment Return Index values. An empty list yields
    all-zero metrics.
    """
    if not activities:
        return summarize_visits(
            [0] * month,
            0,
            include_current_month=include_current_month,
            assignment_count=0,
            can_record_today=False,
        )

    monthly = [0] * month
    recent = [0, 0, 0]
    frequency_total = 0
    visits_today = 0
    for activity in activities:
        if len(activity.monthly_visit_counts) != month:
            raise InvalidInput("Impossible de cumuler des periodes differentes.")
        monthly = [a + b for a, b in zip(monthly, activity.monthly_visit_counts)]
        recent = [a + b for a, b in zip(recent, activity.recent_counts)]
        frequency_total += activity.monthly_frequency
        visits_today += activity.visits_today

    return summarize_visits(
        monthly,
        frequency_total,
        visits_today=visits_today,
        include_current_month=include_current_month,
        recent_counts=tuple(recent),
        assignment_count=len(activities),
        can_record_today=any(activity.can_record_today for activity in activities),
    )
