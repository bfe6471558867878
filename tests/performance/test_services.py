import uuid
from datetime import date

import pytest
from django.contrib.auth import get_user_model

from performance import services
from performance.exceptions import InvalidInput, NotFound
from visits.models import VisitAssignment, VisitEvent


@pytest.fixture
def team_activity(visit_assignment, other_delegate, second_doctor, sales_assignment):
    VisitEvent.objects.create(assignment=visit_assignment, visit_date=date(2024, 1, 5))
    VisitEvent.objects.create(assignment=visit_assignment, visit_date=date(2024, 2, 5))
    return VisitAssignment.objects.create(
        delegate=other_delegate, doctor=second_doctor, monthly_frequency=1,
    )


@pytest.mark.django_db
def test_director_report_pools_the_whole_team(director, supervisor, team_activity, window):
    report = services.node_report(director.pk, window, include_current_month=True)

    assert report["node_id"] == director.pk
    assert report["visits"]["ytd_visits"] == 2
    assert report["visits"]["expected_visits"] == 9
    assert report["visits"]["return_index"] == 22
    assert report["visits"]["status_label"] == "behind"
    assert report["sales"]["ytd_target"] == 300
    assert report["sales"]["ytd_achieved"] == 150
    assert report["sales"]["achievement_rate"] == 50
    assert report["sales"]["status_label"] == "at_risk"
    assert [child["node_id"] for child in report["children"]] == [supervisor.pk]
    assert len(report["per_delegate"]) == 2


@pytest.mark.django_db
def test_report_accepts_string_ids(director, team_activity, window):
    report = services.node_report(str(director.pk), window)
    assert report["node_id"] == director.pk


@pytest.mark.django_db
def test_unknown_node_is_not_found(director, window):
    with pytest.raises(NotFound):
        services.node_report(uuid.uuid4(), window)
    with pytest.raises(NotFound):
        services.node_report("not-a-uuid", window)


@pytest.mark.django_db
def test_report_follows_sales_updates(
    director,
    sales_assignment,
    window,
    django_capture_on_commit_callbacks,
):
    before = services.node_report(director.pk, window)
    assert before["sales"]["ytd_achieved"] == 150

    with django_capture_on_commit_callbacks(execute=True):
        sales_assignment.monthly_achieved = [100, 100, 100] + [0] * 9
        sales_assignment.save()

    after = services.node_report(director.pk, window)
    assert after["sales"]["ytd_achieved"] == 300
    assert after["sales"]["achievement_rate"] == 100


@pytest.mark.django_db
def test_reassigned_sales_row_leaves_the_former_owner(
    delegate,
    other_delegate,
    sales_assignment,
    window,
    django_capture_on_commit_callbacks,
):
    assert services.node_report(delegate.pk, window)["sales"]["annual_target"] == 1200

    with django_capture_on_commit_callbacks(execute=True):
        sales_assignment.delegate = other_delegate
        sales_assignment.save()

    assert services.node_report(delegate.pk, window)["sales"]["annual_target"] == 0
    assert services.node_report(other_delegate.pk, window)["sales"]["annual_target"] == 1200


@pytest.mark.django_db
def test_reassigned_visit_assignment_leaves_the_former_owner(
    delegate,
    other_delegate,
    visit_assignment,
    window,
    django_capture_on_commit_callbacks,
):
    assert services.node_report(delegate.pk, window)["visits"]["expected_visits"] == 6

    with django_capture_on_commit_callbacks(execute=True):
        visit_assignment.delegate = other_delegate
        visit_assignment.save()

    assert services.node_report(delegate.pk, window)["visits"]["expected_visits"] == 0
    assert services.node_report(other_delegate.pk, window)["visits"]["expected_visits"] == 6


@pytest.mark.django_db
def test_renamed_member_shows_up_in_cached_reports(
    director,
    delegate,
    window,
    django_capture_on_commit_callbacks,
):
    services.node_report(director.pk, window)

    with django_capture_on_commit_callbacks(execute=True):
        delegate.last_name = "Khelifi"
        delegate.save()

    report = services.node_report(director.pk, window)
    names = {entry["node_id"]: entry["name"] for entry in report["per_delegate"]}
    assert names[delegate.pk] == "Yacine Khelifi"


@pytest.mark.django_db
def test_product_breakdown_in_node_report(director, sales_assignment, window):
    report = services.node_report(director.pk, window, by_product=True)

    assert [entry["product_id"] for entry in report["sales_by_product"]] == [sales_assignment.product_id]


@pytest.mark.django_db
def test_overview_counts_the_team(director, supervisor, team_activity, window):
    overview = services.node_overview(director.pk, window)

    assert overview["total_supervisors"] == 1
    assert overview["total_delegates"] == 2
    assert overview["delegates_per_supervisor"] == 2
    assert overview["top_performer"] is not None


@pytest.mark.django_db
def test_needs_attention_lists_unmet_quotas_with_recency(
    delegate,
    visit_assignment,
    single_visit_assignment,
    window,
):
    VisitEvent.objects.create(assignment=visit_assignment, visit_date=date(2024, 3, 4))
    VisitEvent.objects.create(assignment=single_visit_assignment, visit_date=date(2024, 3, 4))

    entries = services.needs_attention(delegate, window)

    assert [entry["id"] for entry in entries] == [visit_assignment.pk]
    assert entries[0]["metrics"]["status_label"] == "on_track"


@pytest.mark.django_db
def test_daily_summary(delegate, visit_assignment, single_visit_assignment, window):
    VisitEvent.objects.create(assignment=single_visit_assignment, visit_date=date(2024, 3, 15))

    summary = services.daily_summary(delegate, window)

    assert summary["total_assignments"] == 2
    assert summary["completed_today"] == 1
    assert summary["monthly_targets_met"] == 1


@pytest.mark.django_db
def test_sales_assignments_of_a_delegate(delegate, sales_assignment, window):
    entries = services.delegate_sales_assignments(delegate, window)

    assert len(entries) == 1
    metrics = entries[0]["metrics"]
    assert metrics["achievement_rate"] == 50
    assert metrics["gap"] == 1050
    assert metrics["remaining_months"] == 9
    assert metrics["recruitment_rhythm"] == 24


def test_build_window_clamps_past_periods_and_refuses_future_ones():
    today = date(2024, 3, 15)

    assert services.build_window(today=today).today == today
    assert services.build_window(2023, today=today).today == date(2023, 12, 31)
    assert services.build_window(2024, 2, today=today).today == date(2024, 2, 29)
    with pytest.raises(InvalidInput):
        services.build_window(2024, 5, today=today)


@pytest.mark.django_db
def test_visible_nodes_follow_the_reporting_line(supervisor, delegate, other_delegate, outsider):
    assert services.visible_node_ids(supervisor.user) == {supervisor.pk, delegate.pk, other_delegate.pk}
    assert services.visible_node_ids(delegate.user) == {delegate.pk}

    admin = get_user_model().objects.create_superuser(username="admin", password="x")
    assert services.visible_node_ids(admin) is None

    stranger = get_user_model().objects.create_user(username="stranger", password="x")
    assert services.visible_node_ids(stranger) == set()
