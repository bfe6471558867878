import pytest

from performance.exceptions import InvalidInput
from performance.status import (
    ACHIEVEMENT_RATE_THRESHOLDS,
    RETURN_INDEX_THRESHOLDS,
    RecencyPolicy,
    StatusLabel,
    ThresholdPolicy,
    ThresholdSet,
    classify_recency,
    classify_value,
    get_policy,
)
from performance.visit_activity import summarize_visits


@pytest.mark.parametrize(
    "value, expected",
    [
        (100, StatusLabel.ON_TRACK),
        (66, StatusLabel.ON_TRACK),
        (65, StatusLabel.AT_RISK),
        (33, StatusLabel.AT_RISK),
        (32, StatusLabel.BEHIND),
        (0, StatusLabel.BEHIND),
    ],
)
def test_return_index_thresholds(value, expected):
    assert classify_value(value, RETURN_INDEX_THRESHOLDS) is expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (80, StatusLabel.ON_TRACK),
        (79, StatusLabel.AT_RISK),
        (50, StatusLabel.AT_RISK),
        (49, StatusLabel.BEHIND),
    ],
)
def test_achievement_rate_thresholds(value, expected):
    assert classify_value(value, ACHIEVEMENT_RATE_THRESHOLDS) is expected


@pytest.mark.parametrize(
    "counts, expected",
    [
        ((1, 0, 0), StatusLabel.ON_TRACK),
        ((0, 2, 0), StatusLabel.ON_TRACK),
        ((0, 0, 1), StatusLabel.AT_RISK),
        ((0, 0, 0), StatusLabel.BEHIND),
    ],
)
def test_recency_labels(counts, expected):
    assert classify_recency(*counts) is expected


def test_policies_share_the_classify_interface():
    activity = summarize_visits([1, 1, 0], 1, recent_counts=(0, 1, 1))

    assert activity.return_index == 67
    assert ThresholdPolicy(RETURN_INDEX_THRESHOLDS).classify(activity) is StatusLabel.ON_TRACK
    assert RecencyPolicy().classify(activity) is StatusLabel.ON_TRACK
    assert activity.with_status(RecencyPolicy()).as_dict()["status_label"] == "on_track"


def test_threshold_policy_requires_an_explicit_set():
    with pytest.raises(InvalidInput):
        ThresholdPolicy(None)


def test_inconsistent_threshold_set_is_rejected():
    with pytest.raises(InvalidInput):
        ThresholdSet("broken", on_track=30, at_risk=60)


def test_get_policy_resolves_request_names():
    assert isinstance(get_policy("recency"), RecencyPolicy)
    policy = get_policy("threshold", "achievement_rate")
    assert policy.thresholds is ACHIEVEMENT_RATE_THRESHOLDS
    assert policy.attribute == "return_index"
    assert get_policy("threshold", attribute="achievement_rate").thresholds is ACHIEVEMENT_RATE_THRESHOLDS
    with pytest.raises(InvalidInput):
        get_policy("average")
    with pytest.raises(InvalidInput):
        get_policy("threshold", "unknown")


def test_return_index_can_be_labeled_with_the_achievement_cut_points():
    activity = summarize_visits([1, 1, 0], 1)
    policy = get_policy("threshold", "achievement_rate")

    assert activity.return_index == 67
    assert policy.classify(activity) is StatusLabel.AT_RISK
    assert get_policy("threshold").classify(activity) is StatusLabel.ON_TRACK


def test_missing_indicator_is_invalid_input():
    activity = summarize_visits([1, 1, 0], 1)

    with pytest.raises(InvalidInput):
        ThresholdPolicy(ACHIEVEMENT_RATE_THRESHOLDS).classify(activity)
