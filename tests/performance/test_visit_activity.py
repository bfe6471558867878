from datetime import date

import pytest

from performance.exceptions import InvalidInput
from performance.records import VisitAssignmentRecord, VisitEventRecord
from performance.timewindow import TimeWindow
from performance.visit_activity import (
    compute_visit_activity,
    pool_visit_activities,
    summarize_visits,
)


def _events(assignment_id, *dates):
    return [
        VisitEventRecord(id=index, assignment_id=assignment_id, date=visit_date)
        for index, visit_date in enumerate(dates)
    ]


def test_return_index_for_twice_monthly_assignment_in_march():
    assignment = VisitAssignmentRecord(id="a1", delegate_id="d1", doctor_id="doc", monthly_frequency=2)
    events = _events("a1", date(2024, 1, 5), date(2024, 1, 20), date(2024, 2, 10))

    activity = compute_visit_activity(assignment, events, TimeWindow(date(2024, 3, 15)))

    assert activity.monthly_visit_counts == [2, 1, 0]
    assert activity.ytd_visits == 3
    assert activity.expected_visits == 6
    assert activity.return_index == 50
    assert activity.visits_today == 0
    assert activity.can_record_today is True
    assert activity.monthly_target_met is False


def test_excluding_current_month_only_counts_closed_months():
    assignment = VisitAssignmentRecord(id="a1", delegate_id="d1", doctor_id="doc", monthly_frequency=2)
    events = _events("a1", date(2024, 1, 5), date(2024, 1, 20), date(2024, 2, 10))

    activity = compute_visit_activity(
        assignment, events, TimeWindow(date(2024, 3, 15)), include_current_month=False,
    )

    assert activity.expected_visits == 4
    assert activity.return_index == 75


def test_return_index_is_zero_when_nothing_is_expected():
    assignment = VisitAssignmentRecord(id="a1", delegate_id="d1", doctor_id="doc", monthly_frequency=1)
    activity = compute_visit_activity(
        assignment,
        _events("a1", date(2024, 1, 3)),
        TimeWindow(date(2024, 1, 10)),
        include_current_month=False,
    )

    assert activity.expected_visits == 0
    assert activity.ytd_visits == 1
    assert activity.return_index == 0


def test_visit_today_blocks_another_recording():
    assignment = VisitAssignmentRecord(id="a1", delegate_id="d1", doctor_id="doc", monthly_frequency=2)
    activity = compute_visit_activity(
        assignment, _events("a1", date(2024, 3, 15)), TimeWindow(date(2024, 3, 15)),
    )

    assert activity.visits_today == 1
    assert activity.can_record_today is False
    assert activity.monthly_target_met is False


def test_monthly_target_met_once_frequency_reached():
    assignment = VisitAssignmentRecord(id="a1", delegate_id="d1", doctor_id="doc", monthly_frequency=1)
    activity = compute_visit_activity(
        assignment, _events("a1", date(2024, 3, 2)), TimeWindow(date(2024, 3, 15)),
    )

    assert activity.monthly_target_met is True
    assert activity.can_record_today is False


def test_previous_year_visits_only_feed_recency():
    assignment = VisitAssignmentRecord(id="a1", delegate_id="d1", doctor_id="doc", monthly_frequency=1)
    activity = compute_visit_activity(
        assignment, _events("a1", date(2023, 12, 5)), TimeWindow(date(2024, 2, 10)),
    )

    assert activity.ytd_visits == 0
    assert activity.recent_counts == (0, 0, 1)


def test_events_of_another_assignment_are_rejected():
    assignment = VisitAssignmentRecord(id="a1", delegate_id="d1", doctor_id="doc", monthly_frequency=1)
    with pytest.raises(InvalidInput):
        compute_visit_activity(
            assignment, _events("a2", date(2024, 3, 1)), TimeWindow(date(2024, 3, 15)),
        )


@pytest.mark.parametrize("frequency", [0, 3, None])
def test_invalid_frequency_is_rejected(frequency):
    with pytest.raises(InvalidInput):
        VisitAssignmentRecord(id="a1", delegate_id="d1", doctor_id="doc", monthly_frequency=frequency)


def test_expected_visits_never_decrease_over_the_year():
    expected = [
        summarize_visits([0] * month, 2).expected_visits
        for month in range(1, 13)
    ]
    assert expected == sorted(expected)
    assert expected[-1] == 24


def test_pooling_sums_raw_counts_instead_of_averaging():
    full = summarize_visits([10], 10)
    empty = summarize_visits([0], 2)

    pooled = pool_visit_activities([full, empty], 1)

    assert (full.return_index, empty.return_index) == (100, 0)
    assert pooled.ytd_visits == 10
    assert pooled.expected_visits == 12
    assert pooled.return_index == 83
    assert pooled.assignment_count == 2


def test_pooling_nothing_yields_zeros():
    pooled = pool_visit_activities([], 3)

    assert pooled.monthly_visit_counts == [0, 0, 0]
    assert pooled.expected_visits == 0
    assert pooled.return_index == 0
    assert pooled.assignment_count == 0
    assert pooled.can_record_today is False


def test_past_period_reports_no_visit_today():
    assignment = VisitAssignmentRecord(id="a1", delegate_id="d1", doctor_id="doc", monthly_frequency=2)
    events = _events("a1", date(2024, 2, 29))
    past = TimeWindow.as_of(2024, 2, today=date(2024, 5, 20))

    activity = compute_visit_activity(assignment, events, past)

    assert activity.monthly_visit_counts == [0, 1]
    assert activity.visits_today == 0
    assert activity.can_record_today is False
