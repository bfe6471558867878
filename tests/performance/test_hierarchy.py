from datetime import date

import pytest

from performance.exceptions import InvalidInput, NotFound
from performance.hierarchy import HierarchyScope, aggregate_node, build_overview
from performance.records import (
    HierarchyNodeRecord,
    SalesAssignmentRecord,
    VisitAssignmentRecord,
    VisitEventRecord,
)
from performance.status import StatusLabel
from performance.timewindow import TimeWindow


def _node(node_id, supervisor_id=None, role="DELEGATE"):
    return HierarchyNodeRecord(id=node_id, supervisor_id=supervisor_id, role=role, name=node_id)


@pytest.fixture
def scope():
    return HierarchyScope([
        _node("D", role="SALES_DIRECTOR"),
        _node("S1", "D", role="SUPERVISOR"),
        _node("S2", "D", role="SUPERVISOR"),
        _node("d1", "S1"),
        _node("d2", "S1"),
        _node("d3", "S2"),
    ])


@pytest.fixture
def inputs():
    visit_assignments = [
        VisitAssignmentRecord(id="a1", delegate_id="d1", doctor_id="doc1", monthly_frequency=2),
        VisitAssignmentRecord(id="a3", delegate_id="d3", doctor_id="doc2", monthly_frequency=1),
    ]
    days = [date(2024, 1, 5), date(2024, 1, 20), date(2024, 2, 3),
            date(2024, 2, 17), date(2024, 3, 1), date(2024, 3, 10)]
    visit_events = [
        VisitEventRecord(id=index, assignment_id="a1", date=day)
        for index, day in enumerate(days)
    ]
    sales = [
        SalesAssignmentRecord(
            id="s1", delegate_id="d1", product_id="p1", year=2024,
            monthly_target=[100] * 12, monthly_achieved=[100] * 3 + [0] * 9,
        ),
        SalesAssignmentRecord(
            id="s3", delegate_id="d3", product_id="p2", year=2024,
            monthly_target=[50] * 12, monthly_achieved=[0] * 12,
        ),
        SalesAssignmentRecord(
            id="old", delegate_id="d1", product_id="p1", year=2023,
            monthly_target=[999] * 12, monthly_achieved=[999] * 12,
        ),
    ]
    return visit_assignments, visit_events, sales


def test_scope_navigation(scope):
    assert scope.children("D") == ["S1", "S2"]
    assert scope.ancestors("d1") == ["S1", "D"]
    assert scope.descendants("D") == ["D", "S1", "S2", "d1", "d2", "d3"]
    assert scope.descendants("S1", include_self=False) == ["d1", "d2"]
    assert scope.depth("D") == 1
    assert scope.depth("d3") == 3
    assert scope.is_ancestor("D", "d2")
    assert not scope.is_ancestor("S2", "d1")
    with pytest.raises(NotFound):
        scope.node("ghost")


def test_cycles_are_rejected():
    with pytest.raises(InvalidInput):
        HierarchyScope([_node("a", "b"), _node("b", "a")])


def test_self_supervision_is_rejected():
    with pytest.raises(InvalidInput):
        HierarchyScope([_node("a", "a")])


def test_dangling_supervisor_is_rejected():
    with pytest.raises(InvalidInput):
        HierarchyScope([_node("a", "missing")])


def test_duplicate_nodes_are_rejected():
    with pytest.raises(InvalidInput):
        HierarchyScope([_node("a"), _node("a")])


def test_hierarchy_deeper_than_three_levels_is_rejected():
    with pytest.raises(InvalidInput):
        HierarchyScope([_node("a"), _node("b", "a"), _node("c", "b"), _node("d", "c")])


def test_director_rollup_pools_every_assignment_below(scope, inputs):
    report = aggregate_node(scope, "D", *inputs, TimeWindow(date(2024, 3, 15)))
    visits = report.metrics.visits
    sales = report.metrics.sales

    assert visits.ytd_visits == 6
    assert visits.expected_visits == 9
    assert visits.return_index == 67
    assert visits.status_label is StatusLabel.ON_TRACK

    assert sales.annual_target == 1800
    assert sales.ytd_target == 450
    assert sales.ytd_achieved == 300
    assert sales.achievement_rate == 67
    assert sales.recruitment_rhythm == 34
    assert sales.status_label is StatusLabel.AT_RISK


def test_drill_down_keeps_per_child_and_per_delegate_figures(scope, inputs):
    report = aggregate_node(scope, "D", *inputs, TimeWindow(date(2024, 3, 15)))

    children = {child.node_id: child for child in report.children}
    assert children["S1"].visits.return_index == 100
    assert children["S2"].visits.return_index == 0

    delegates = {entry.node_id: entry for entry in report.per_delegate}
    assert list(delegates) == ["d1", "d2", "d3"]
    assert delegates["d2"].visits.assignment_count == 0
    assert delegates["d1"].sales.achievement_rate == 100


def test_supervisor_rollup_ignores_other_teams(scope, inputs):
    report = aggregate_node(scope, "S1", *inputs, TimeWindow(date(2024, 3, 15)))

    assert report.metrics.visits.expected_visits == 6
    assert report.metrics.sales.annual_target == 1200


def test_product_breakdown(scope, inputs):
    report = aggregate_node(scope, "D", *inputs, TimeWindow(date(2024, 3, 15)), by_product=True)

    breakdown = report.metrics.sales_by_product
    assert set(breakdown) == {"p1", "p2"}
    assert breakdown["p1"].annual_target == 1200
    assert breakdown["p2"].annual_target == 600
    assert len(report.as_dict()["sales_by_product"]) == 2


def test_overview_counts_and_rankings(scope, inputs):
    report = aggregate_node(scope, "D", *inputs, TimeWindow(date(2024, 3, 15)))

    overview = build_overview(scope, report)

    assert overview["total_supervisors"] == 2
    assert overview["total_delegates"] == 3
    assert overview["delegates_per_supervisor"] == 2
    assert overview["children_ranking"][0]["node_id"] == "S1"
    assert overview["top_performer"]["node_id"] == "d1"
    assert overview["bottom_performer"]["node_id"] == "d3"
    assert [entry["rank"] for entry in overview["delegate_ranking"]] == [1, 2, 3]
