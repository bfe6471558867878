from datetime import date

import pytest

from performance.exceptions import InvalidInput
from performance.timewindow import TimeWindow


def test_window_is_anchored_on_the_injected_day():
    window = TimeWindow.from_clock(lambda: date(2024, 3, 15))

    assert window.year == 2024
    assert window.current_month() == 3
    assert list(window.ytd_months(3)) == [1, 2, 3]
    assert window.elapsed_months(include_current_month=True) == 3
    assert window.elapsed_months(include_current_month=False) == 2


def test_month_range_handles_leap_years():
    assert TimeWindow.month_range(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert TimeWindow.month_range(2023, 2) == (date(2023, 2, 1), date(2023, 2, 28))


def test_recent_months_cross_the_year_boundary():
    window = TimeWindow(date(2024, 2, 10))

    assert window.recent_months(3) == [(2024, 2), (2024, 1), (2023, 12)]
    assert window.history_start() == date(2023, 12, 1)


def test_as_of_clamps_past_months_to_their_last_day():
    today = date(2024, 5, 20)

    assert TimeWindow.as_of(2024, 2, today=today).today == date(2024, 2, 29)
    assert TimeWindow.as_of(2024, 2, today=today).live is False
    assert TimeWindow.as_of(2024, 5, today=today).today == today
    assert TimeWindow.as_of(2024, 5, today=today).live is True


@pytest.mark.parametrize("month", [0, 13, "3", True])
def test_invalid_months_are_rejected(month):
    with pytest.raises(InvalidInput):
        TimeWindow.ytd_months(month)
