"""Visit recording: the only write path for ``VisitEvent`` rows."""
from __future__ import annotations

import logging
from datetime import date

from django.db import IntegrityError, transaction

from performance.exceptions import DuplicateVisit, InvalidInput, NotFound, QuotaExceeded
from performance.timewindow import TimeWindow
from visits.models import VisitAssignment, VisitEvent

logger = logging.getLogger("fieldforce")


def record_visit(
    assignment: VisitAssignment,
    visit_date: date | None = None,
    *,
    window: TimeWindow | None = None,
    recorded_by=None,
) -> VisitEvent:
    """Record one visit on ``assignment``.

    Parameters
    ----------
    assignment:
        Already resolved assignment; ownership is checked by the caller.
    visit_date:
        Day of the visit, defaults to ``window.today``. Future dates are refused.
    window:
        Injected "now"; built from the clock when omitted.

    Raises
    ------
    NotFound
        The assignment is unsaved or was deleted meanwhile.
    InvalidInput
        ``visit_date`` lies in the future.
    DuplicateVisit
        A visit already exists for that assignment and day.
    QuotaExceeded
        The month of ``visit_date`` already holds ``monthly_frequency`` visits.

    Cache invalidation runs from the ``post_save`` signal once the
    transaction commits.
    """
    window = window or TimeWindow.from_clock()
    if assignment is None or assignment.pk is None or assignment._state.adding:
        raise NotFound("Affectation introuvable.")

    visit_date = visit_date or window.today
    if visit_date > window.today:
        raise InvalidInput(
            "Impossible d'enregistrer une visite dans le futur.",
            assignment_id=assignment.pk,
            visit_date=visit_date,
        )

    with transaction.atomic():
        # Single writer per assignment.
        locked = VisitAssignment.objects.select_for_update().filter(pk=assignment.pk).first()
        if locked is None:
            raise NotFound("Affectation introuvable.", assignment_id=assignment.pk)

        events = VisitEvent.objects.filter(assignment=locked)
        if events.filter(visit_date=visit_date).exists():
            logger.info(
                "Visit rejected (duplicate) assignment=%s date=%s", locked.pk, visit_date,
            )
            raise DuplicateVisit(assignment_id=locked.pk, visit_date=visit_date)

        first_day, last_day = TimeWindow.month_range(visit_date.year, visit_date.month)
        month_visits = events.filter(visit_date__range=(first_day, last_day)).count()
        if month_visits >= locked.monthly_frequency:
            logger.info(
                "Visit rejected (quota) assignment=%s date=%s visits=%d/%d",
                locked.pk,
                visit_date,
                month_visits,
                locked.monthly_frequency,
            )
            raise QuotaExceeded(
                assignment_id=locked.pk,
                month_visits=month_visits,
                monthly_frequency=locked.monthly_frequency,
            )

        try:
            with transaction.atomic():
                event = VisitEvent.objects.create(
                    assignment=locked,
                    visit_date=visit_date,
                    recorded_by=recorded_by,
                )
        except IntegrityError:
            # Concurrent insert won the unique (assignment, visit_date) race.
            raise DuplicateVisit(assignment_id=locked.pk, visit_date=visit_date) from None

    logger.info(
        "Visit recorded assignment=%s delegate=%s date=%s",
        locked.pk,
        locked.delegate_id,
        visit_date,
        extra={"assignment_id": str(locked.pk), "visit_date": visit_date.isoformat()},
    )
    return event
