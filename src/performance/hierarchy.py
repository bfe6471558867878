"""Hierarchy-aware rollups: delegate -> supervisor -> sales director.

Rollups pool raw inputs before computing any ratio:

* visits: monthly counts and frequencies are summed across every assignment
  under the node, then one Return Index is computed from the sums;
* sales: monthly target/achieved arrays are summed element-wise, then the
  Recruitment Rhythm calculator runs once on the sums.

Per-delegate and per-child figures are returned next to the pooled numbers
for drill-down; they are never averaged into the pooled figure.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Iterable

from performance.exceptions import InvalidInput, NotFound
from performance.records import (
    HierarchyNodeRecord,
    SalesAssignmentRecord,
    VisitAssignmentRecord,
    VisitEventRecord,
)
from performance.sales_rhythm import SalesRhythm, pool_sales_assignments
from performance.status import (
    ACHIEVEMENT_RATE_THRESHOLDS,
    RETURN_INDEX_THRESHOLDS,
    ThresholdPolicy,
)
from performance.timewindow import TimeWindow
from performance.utils import round_half_up
from performance.visit_activity import (
    VisitActivity,
    compute_visit_activity,
    pool_visit_activities,
)

logger = logging.getLogger(__name__)

MAX_DEPTH = 3

ROLE_DELEGATE = "DELEGATE"
ROLE_SUPERVISOR = "SUPERVISOR"
ROLE_SALES_DIRECTOR = "SALES_DIRECTOR"


class HierarchyScope:
    """Arena of hierarchy nodes indexed by id, validated acyclic on construction."""

    def __init__(self, nodes: Iterable[HierarchyNodeRecord], max_depth: int = MAX_DEPTH) -> None:
        self._nodes: dict[Any, HierarchyNodeRecord] = {}
        for node in nodes:
            if node.id in self._nodes:
                raise InvalidInput(f"Noeud en double dans la hierarchie: {node.id}.")
            self._nodes[node.id] = node

        self._children: dict[Any, list] = defaultdict(list)
        for node in self._nodes.values():
            if node.supervisor_id is None:
                continue
            if node.supervisor_id not in self._nodes:
                raise InvalidInput(
                    f"Superviseur {node.supervisor_id} introuvable pour {node.id}.",
                    node_id=node.id,
                )
            self._children[node.supervisor_id].append(node.id)

        self._depths = self._compute_depths()
        deepest = max(self._depths.values(), default=0)
        if deepest > max_depth:
            raise InvalidInput(
                f"Hierarchie trop profonde ({deepest} niveaux, maximum {max_depth})."
            )

    def _compute_depths(self) -> dict:
        depths: dict[Any, int] = {}
        for node_id in self._nodes:
            path = []
            on_path = set()
            current = node_id
            while current is not None and current not in depths:
                if current in on_path:
                    raise InvalidInput(
                        f"Cycle detecte dans la hierarchie autour de {current}.",
                        node_id=current,
                    )
                on_path.add(current)
                path.append(current)
                current = self._nodes[current].supervisor_id
            base = depths[current] if current is not None else 0
            for offset, path_id in enumerate(reversed(path), start=1):
                depths[path_id] = base + offset
        return depths

    def __contains__(self, node_id) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def node(self, node_id) -> HierarchyNodeRecord:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise NotFound(f"Noeud {node_id} introuvable.", node_id=node_id) from None

    def depth(self, node_id) -> int:
        self.node(node_id)
        return self._depths[node_id]

    def children(self, node_id) -> list:
        self.node(node_id)
        return list(self._children.get(node_id, []))

    def ancestors(self, node_id) -> list:
        """Parent first, root last."""
        chain = []
        current = self.node(node_id).supervisor_id
        while current is not None:
            chain.append(current)
            current = self._nodes[current].supervisor_id
        return chain

    def descendants(self, node_id, include_self: bool = True) -> list:
        """Breadth-first list of the node's subtree."""
        self.node(node_id)
        ordered = [node_id] if include_self else []
        queue = list(self._children.get(node_id, []))
        while queue:
            current = queue.pop(0)
            ordered.append(current)
            queue.extend(self._children.get(current, []))
        return ordered

    def is_ancestor(self, ancestor_id, node_id) -> bool:
        return ancestor_id in self.ancestors(node_id)


@dataclass(frozen=True)
class NodeMetrics:
    node_id: Any
    role: str
    name: str
    visits: VisitActivity
    sales: SalesRhythm
    sales_by_product: dict = field(default_factory=dict)

    def as_dict(self) -> dict:
        return {
            "node_id": self.node_id,
            "role": self.role,
            "name": self.name,
            "visits": self.visits.as_dict(),
            "sales": self.sales.as_dict(),
            "sales_by_product": [rhythm.as_dict() for rhythm in self.sales_by_product.values()],
        }


@dataclass(frozen=True)
class NodeReport:
    metrics: NodeMetrics
    children: list = field(default_factory=list)
    per_delegate: list = field(default_factory=list)

    def as_dict(self) -> dict:
        data = self.metrics.as_dict()
        data["children"] = [child.as_dict() for child in self.children]
        data["per_delegate"] = [delegate.as_dict() for delegate in self.per_delegate]
        return data


def _pool(
    node: HierarchyNodeRecord,
    activities: list[VisitActivity],
    sales_rows: list[SalesAssignmentRecord],
    window: TimeWindow,
    *,
    include_current_month: bool,
    by_product: bool,
    visit_policy,
    sales_policy,
) -> NodeMetrics:
    month = window.current_month()
    visits = pool_visit_activities(
        activities, month, include_current_month=include_current_month,
    ).with_status(visit_policy)
    sales = pool_sales_assignments(sales_rows, month).with_status(sales_policy)

    sales_by_product = {}
    if by_product:
        grouped = defaultdict(list)
        for row in sales_rows:
            grouped[row.product_id].append(row)
        for product_id, rows in grouped.items():
            sales_by_product[product_id] = pool_sales_assignments(
                rows, month, product_id=product_id,
            ).with_status(sales_policy)

    return NodeMetrics(
        node_id=node.id,
        role=node.role,
        name=node.name,
        visits=visits,
        sales=sales,
        sales_by_product=sales_by_product,
    )


def aggregate_node(
    scope: HierarchyScope,
    root_id,
    visit_assignments: Iterable[VisitAssignmentRecord],
    visit_events: Iterable[VisitEventRecord],
    sales_assignments: Iterable[SalesAssignmentRecord],
    window: TimeWindow,
    *,
    include_current_month: bool = True,
    by_product: bool = False,
    visit_policy=None,
    sales_policy=None,
) -> NodeReport:
    """Pooled metrics for ``root_id`` and everything transitively below it."""
    visit_policy = visit_policy or ThresholdPolicy(RETURN_INDEX_THRESHOLDS)
    sales_policy = sales_policy or ThresholdPolicy(ACHIEVEMENT_RATE_THRESHOLDS)

    subtree = scope.descendants(root_id)
    in_scope = set(subtree)

    events_by_assignment = defaultdict(list)
    for event in visit_events:
        events_by_assignment[event.assignment_id].append(event)

    activities_by_owner = defaultdict(list)
    for assignment in visit_assignments:
        if assignment.delegate_id not in in_scope:
            continue
        activities_by_owner[assignment.delegate_id].append(
            compute_visit_activity(
                assignment,
                events_by_assignment.get(assignment.id, []),
                window,
                include_current_month=include_current_month,
            )
        )

    sales_by_owner = defaultdict(list)
    for row in sales_assignments:
        if row.delegate_id not in in_scope or row.year != window.year:
            continue
        sales_by_owner[row.delegate_id].append(row)

    options = {
        "include_current_month": include_current_month,
        "by_product": by_product,
        "visit_policy": visit_policy,
        "sales_policy": sales_policy,
    }

    def pool_subtree(node_id) -> NodeMetrics:
        members = scope.descendants(node_id)
        activities = [a for member in members for a in activities_by_owner.get(member, [])]
        rows = [r for member in members for r in sales_by_owner.get(member, [])]
        return _pool(scope.node(node_id), activities, rows, window, **options)

    root_metrics = pool_subtree(root_id)
    children = [pool_subtree(child_id) for child_id in scope.children(root_id)]
    per_delegate = [
        _pool(
            scope.node(member),
            activities_by_owner.get(member, []),
            sales_by_owner.get(member, []),
            window,
            **options,
        )
        for member in subtree
        if scope.node(member).role == ROLE_DELEGATE
        or member in activities_by_owner
        or member in sales_by_owner
    ]

    logger.debug(
        "Aggregated node %s: %d members, %d visit assignments, %d sales rows",
        root_id,
        len(subtree),
        root_metrics.visits.assignment_count,
        root_metrics.sales.assignment_count,
    )
    return NodeReport(metrics=root_metrics, children=children, per_delegate=per_delegate)


def _ranking(entries: list[NodeMetrics], key) -> list[dict]:
    ordered = sorted(entries, key=key, reverse=True)
    return [
        {
            "rank": position,
            "node_id": entry.node_id,
            "name": entry.name,
            "role": entry.role,
            "return_index": entry.visits.return_index,
            "achievement_rate": entry.sales.achievement_rate,
            "recruitment_rhythm": entry.sales.recruitment_rhythm,
        }
        for position, entry in enumerate(ordered, start=1)
    ]


def build_overview(scope: HierarchyScope, report: NodeReport) -> dict:
    """Team structure counts and performer rankings for a node report."""
    root_id = report.metrics.node_id
    below = [scope.node(node_id) for node_id in scope.descendants(root_id, include_self=False)]
    supervisors = sum(1 for node in below if node.role == ROLE_SUPERVISOR)
    delegates = sum(1 for node in below if node.role == ROLE_DELEGATE)

    by_achievement = _ranking(
        report.per_delegate,
        key=lambda entry: (entry.sales.achievement_rate, entry.visits.return_index),
    )
    return {
        "node_id": root_id,
        "total_supervisors": supervisors,
        "total_delegates": delegates,
        "delegates_per_supervisor": round_half_up(delegates / supervisors) if supervisors else 0,
        "return_index": report.metrics.visits.return_index,
        "achievement_rate": report.metrics.sales.achievement_rate,
        "recruitment_rhythm": report.metrics.sales.recruitment_rhythm,
        "children_ranking": _ranking(
            report.children,
            key=lambda entry: (entry.visits.return_index, entry.sales.achievement_rate),
        ),
        "delegate_ranking": by_achievement,
        "top_performer": by_achievement[0] if by_achievement else None,
        "bottom_performer": by_achievement[-1] if by_achievement else None,
    }
