"""Read services: load records from the ORM, run the engine, return plain dicts.

Every function takes an explicit ``TimeWindow``; only ``build_window`` reads
the clock. Results are cached through ``performance.cache``.
"""
from __future__ import annotations

import logging
import uuid
from datetime import date

from django.conf import settings
from django.utils import timezone

from performance import cache as metrics_cache
from performance.exceptions import InvalidInput, NotFound
from performance.hierarchy import HierarchyScope, aggregate_node, build_overview
from performance.sales_rhythm import compute_assignment_rhythm
from performance.status import (
    ACHIEVEMENT_RATE_THRESHOLDS,
    RETURN_INDEX_THRESHOLDS,
    RecencyPolicy,
    ThresholdPolicy,
)
from performance.timewindow import TimeWindow
from performance.visit_activity import compute_visit_activity

logger = logging.getLogger("fieldforce")


# ───────────────────────────────────────────────────────────────────────────
# Parameters
# ───────────────────────────────────────────────────────────────────────────

def default_include_current_month() -> bool:
    return bool(getattr(settings, "PERFORMANCE_INCLUDE_CURRENT_MONTH", True))


def build_window(year: int | None = None, month: int | None = None, today: date | None = None) -> TimeWindow:
    """As-of window for the request; defaults to the local date."""
    today = today or timezone.localdate()
    if year is None and month is None:
        return TimeWindow(today)
    year = year or today.year
    month = month or (today.month if year == today.year else 12)
    as_of = TimeWindow.as_of(year, month, today=today)
    if as_of.today > today:
        raise InvalidInput("La periode demandee est dans le futur.", year=year, month=month)
    return as_of


def _window_key(window: TimeWindow) -> str:
    return window.today.isoformat() if window.live else f"{window.today.isoformat()}~past"


def _policy_key(policy) -> str:
    return repr(policy).replace(" ", "")


def _node_pk(node_id) -> uuid.UUID:
    if isinstance(node_id, uuid.UUID):
        return node_id
    try:
        return uuid.UUID(str(node_id))
    except ValueError:
        raise NotFound(f"Noeud {node_id} introuvable.", node_id=node_id) from None


# ───────────────────────────────────────────────────────────────────────────
# Loading
# ───────────────────────────────────────────────────────────────────────────

def load_scope() -> HierarchyScope:
    from organization.models import Delegate

    return HierarchyScope(delegate.to_record() for delegate in Delegate.objects.all())


def _load_visit_inputs(delegate_ids, window: TimeWindow):
    from visits.models import VisitAssignment, VisitEvent

    assignments = list(VisitAssignment.objects.filter(delegate_id__in=delegate_ids))
    events = VisitEvent.objects.filter(
        assignment__in=assignments,
        visit_date__gte=window.history_start(),
        visit_date__lte=window.today,
    )
    return [a.to_record() for a in assignments], [e.to_record() for e in events]


def _load_sales_inputs(delegate_ids, window: TimeWindow):
    from sales.models import SalesAssignment

    rows = SalesAssignment.objects.filter(delegate_id__in=delegate_ids, year=window.year)
    return [row.to_record() for row in rows]


# ───────────────────────────────────────────────────────────────────────────
# Per assignment
# ───────────────────────────────────────────────────────────────────────────

def visit_assignment_metrics(
    assignment,
    window: TimeWindow,
    *,
    include_current_month: bool | None = None,
    policy=None,
) -> dict:
    """Return Index block of one ``VisitAssignment`` as a dict."""
    from visits.models import VisitEvent

    if include_current_month is None:
        include_current_month = default_include_current_month()
    policy = policy or ThresholdPolicy(RETURN_INDEX_THRESHOLDS)

    def compute() -> dict:
        events = VisitEvent.objects.filter(
            assignment_id=assignment.pk,
            visit_date__gte=window.history_start(),
            visit_date__lte=window.today,
        )
        activity = compute_visit_activity(
            assignment.to_record(),
            [event.to_record() for event in events],
            window,
            include_current_month=include_current_month,
        )
        return activity.with_status(policy).as_dict()

    return metrics_cache.get_or_compute(
        metrics_cache.SCOPE_VISIT_ASSIGNMENT,
        assignment.pk,
        (_window_key(window), int(include_current_month), _policy_key(policy)),
        compute,
    )


def _visit_assignment_payload(assignment, metrics: dict) -> dict:
    doctor = assignment.doctor
    return {
        "id": assignment.pk,
        "delegate": assignment.delegate_id,
        "doctor": {
            "id": doctor.pk,
            "name": str(doctor),
            "specialty": doctor.specialty,
            "brick": str(doctor.brick) if doctor.brick_id else None,
        },
        "monthly_frequency": assignment.monthly_frequency,
        "metrics": metrics,
    }


def delegate_visit_assignments(
    delegate,
    window: TimeWindow,
    *,
    include_current_month: bool | None = None,
    policy=None,
) -> list[dict]:
    from visits.models import VisitAssignment

    assignments = (
        VisitAssignment.objects.filter(delegate=delegate)
        .select_related("doctor", "doctor__brick")
        .order_by("doctor__last_name", "doctor__first_name")
    )
    return [
        _visit_assignment_payload(
            assignment,
            visit_assignment_metrics(
                assignment,
                window,
                include_current_month=include_current_month,
                policy=policy,
            ),
        )
        for assignment in assignments
    ]


def needs_attention(delegate, window: TimeWindow, *, include_current_month: bool | None = None) -> list[dict]:
    """Assignments whose current-month quota is not met, labeled by visit recency."""
    entries = delegate_visit_assignments(
        delegate,
        window,
        include_current_month=include_current_month,
        policy=RecencyPolicy(),
    )
    return [entry for entry in entries if not entry["metrics"]["monthly_target_met"]]


def daily_summary(delegate, window: TimeWindow) -> dict:
    entries = delegate_visit_assignments(delegate, window)
    return {
        "date": window.today,
        "total_assignments": len(entries),
        "completed_today": sum(1 for entry in entries if entry["metrics"]["visits_today"] > 0),
        "monthly_targets_met": sum(1 for entry in entries if entry["metrics"]["monthly_target_met"]),
    }


def sales_assignment_metrics(assignment, window: TimeWindow) -> dict:
    policy = ThresholdPolicy(ACHIEVEMENT_RATE_THRESHOLDS)

    def compute() -> dict:
        rhythm = compute_assignment_rhythm(assignment.to_record(), window.current_month())
        return rhythm.with_status(policy).as_dict()

    return metrics_cache.get_or_compute(
        metrics_cache.SCOPE_SALES_ASSIGNMENT,
        assignment.pk,
        (window.today.isoformat(),),
        compute,
    )


def delegate_sales_assignments(delegate, window: TimeWindow) -> list[dict]:
    from sales.models import SalesAssignment

    assignments = (
        SalesAssignment.objects.filter(delegate=delegate, year=window.year)
        .select_related("product")
        .order_by("product__name")
    )
    return [
        {
            "id": assignment.pk,
            "delegate": assignment.delegate_id,
            "product": {"id": assignment.product_id, "name": assignment.product.name},
            "year": assignment.year,
            "metrics": sales_assignment_metrics(assignment, window),
        }
        for assignment in assignments
    ]


# ───────────────────────────────────────────────────────────────────────────
# Per hierarchy node
# ───────────────────────────────────────────────────────────────────────────

def _node_report(scope: HierarchyScope, node_id, window: TimeWindow, *, include_current_month: bool, by_product: bool):
    members = scope.descendants(node_id)
    visit_assignments, visit_events = _load_visit_inputs(members, window)
    sales_rows = _load_sales_inputs(members, window)
    return aggregate_node(
        scope,
        node_id,
        visit_assignments,
        visit_events,
        sales_rows,
        window,
        include_current_month=include_current_month,
        by_product=by_product,
    )


def node_report(
    node_id,
    window: TimeWindow,
    *,
    include_current_month: bool | None = None,
    by_product: bool = False,
) -> dict:
    """Pooled report for a delegate, supervisor or sales director."""
    node_id = _node_pk(node_id)
    if include_current_month is None:
        include_current_month = default_include_current_month()

    def compute() -> dict:
        scope = load_scope()
        report = _node_report(
            scope,
            node_id,
            window,
            include_current_month=include_current_month,
            by_product=by_product,
        )
        logger.debug("Computed node report node=%s as_of=%s", node_id, window.today)
        return report.as_dict()

    return metrics_cache.get_or_compute(
        metrics_cache.SCOPE_NODE,
        node_id,
        ("report", _window_key(window), int(include_current_month), int(by_product)),
        compute,
    )


def node_overview(node_id, window: TimeWindow, *, include_current_month: bool | None = None) -> dict:
    """Team structure and rankings below a node."""
    node_id = _node_pk(node_id)
    if include_current_month is None:
        include_current_month = default_include_current_month()

    def compute() -> dict:
        scope = load_scope()
        report = _node_report(
            scope,
            node_id,
            window,
            include_current_month=include_current_month,
            by_product=False,
        )
        return build_overview(scope, report)

    return metrics_cache.get_or_compute(
        metrics_cache.SCOPE_NODE,
        node_id,
        ("overview", _window_key(window), int(include_current_month)),
        compute,
    )


def visible_node_ids(user) -> set | None:
    """Nodes ``user`` may read: its own subtree. ``None`` means unrestricted."""
    if getattr(user, "is_superuser", False):
        return None
    delegate = getattr(user, "delegate_profile", None)
    if delegate is None:
        return set()
    try:
        return set(load_scope().descendants(delegate.pk))
    except NotFound:
        return set()
