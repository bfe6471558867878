import pytest

from performance import cache as metrics_cache


def test_bumping_a_generation_changes_the_key():
    before = metrics_cache.metrics_key(metrics_cache.SCOPE_NODE, "n1", "report")

    metrics_cache.bump_generation(metrics_cache.SCOPE_NODE, "n1")

    assert metrics_cache.metrics_key(metrics_cache.SCOPE_NODE, "n1", "report") != before
    assert metrics_cache.metrics_key(metrics_cache.SCOPE_NODE, "n2", "report").endswith(":g1:report")


def test_get_or_compute_reuses_cached_values():
    calls = []

    def compute():
        calls.append(1)
        return {"value": len(calls)}

    first = metrics_cache.get_or_compute(metrics_cache.SCOPE_NODE, "n1", ("x",), compute)
    second = metrics_cache.get_or_compute(metrics_cache.SCOPE_NODE, "n1", ("x",), compute)
    metrics_cache.invalidate_hierarchy()
    third = metrics_cache.get_or_compute(metrics_cache.SCOPE_NODE, "n1", ("x",), compute)

    assert first == second == {"value": 1}
    assert third == {"value": 2}


@pytest.mark.django_db
def test_ancestor_chain_walks_up_to_the_director(director, supervisor, delegate):
    assert metrics_cache.ancestor_chain(delegate.pk) == [delegate.pk, supervisor.pk, director.pk]
    assert metrics_cache.ancestor_chain(None) == []


@pytest.mark.django_db
def test_visit_invalidation_reaches_every_ancestor(director, supervisor, delegate, visit_assignment):
    keys = {
        node.pk: metrics_cache.metrics_key(metrics_cache.SCOPE_NODE, node.pk, "report")
        for node in (director, supervisor, delegate)
    }

    node_ids = metrics_cache.invalidate_visit_assignment(visit_assignment.pk, delegate.pk)

    assert node_ids == [delegate.pk, supervisor.pk, director.pk]
    for node_id, key in keys.items():
        assert metrics_cache.metrics_key(metrics_cache.SCOPE_NODE, node_id, "report") != key


@pytest.mark.django_db
def test_recorded_visit_warms_the_hierarchy(
    delegate,
    visit_assignment,
    django_capture_on_commit_callbacks,
    monkeypatch,
):
    warmed = []
    monkeypatch.setattr(
        "performance.tasks.warm_node_metrics.delay",
        lambda node_ids: warmed.append(node_ids),
    )
    from visits.services import record_visit

    with django_capture_on_commit_callbacks(execute=True):
        record_visit(visit_assignment)

    assert warmed == [[str(delegate.pk), str(delegate.supervisor_id), str(delegate.supervisor.supervisor_id)]]
