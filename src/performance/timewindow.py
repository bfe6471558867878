"""As-of month/year bucketing helpers.

A ``TimeWindow`` is anchored on an injected "today" so every computation
built on top of it is deterministic. Production code builds one with
``TimeWindow.from_clock()``; tests pass a fixed date.
"""
from __future__ import annotations

import calendar
from datetime import date
from typing import Callable

from django.utils import timezone

from performance.exceptions import InvalidInput


def _check_month(month: int) -> None:
    if not isinstance(month, int) or isinstance(month, bool) or not 1 <= month <= 12:
        raise InvalidInput(f"Mois invalide: {month!r} (attendu 1..12).")


class TimeWindow:
    """Calendar arithmetic relative to a fixed ``today``."""

    def __init__(self, today: date, *, live: bool = True) -> None:
        self.today = today
        # False when ``today`` is a stand-in for the end of a past month.
        self.live = live

    def __repr__(self) -> str:
        suffix = "" if self.live else ", live=False"
        return f"TimeWindow(today={self.today.isoformat()}{suffix})"

    @classmethod
    def from_clock(cls, clock: Callable[[], date] | None = None) -> "TimeWindow":
        clock = clock or timezone.localdate
        return cls(clock())

    @classmethod
    def as_of(cls, year: int, month: int, today: date | None = None) -> "TimeWindow":
        """Window anchored on ``year``/``month``.

        ``today`` keeps its day-of-month when it already falls in that month;
        otherwise it is clamped to the last day of the month (past months) so
        the whole month counts as elapsed, and the window is not ``live``:
        no real day is "today" in it.
        """
        _check_month(month)
        if today is not None and (today.year, today.month) == (year, month):
            return cls(today)
        return cls(date(year, month, calendar.monthrange(year, month)[1]), live=False)

    @property
    def year(self) -> int:
        return self.today.year

    def current_month(self) -> int:
        return self.today.month

    @staticmethod
    def days_in_month(year: int, month: int) -> int:
        _check_month(month)
        return calendar.monthrange(year, month)[1]

    @classmethod
    def month_range(cls, year: int, month: int) -> tuple[date, date]:
        """Return ``(first_day, last_day)`` of the month."""
        return date(year, month, 1), date(year, month, cls.days_in_month(year, month))

    @staticmethod
    def ytd_months(as_of_month: int) -> range:
        _check_month(as_of_month)
        return range(1, as_of_month + 1)

    def elapsed_months(self, include_current_month: bool = True) -> int:
        month = self.current_month()
        return month if include_current_month else month - 1

    def recent_months(self, count: int = 3) -> list[tuple[int, int]]:
        """``(year, month)`` pairs from the current month backwards."""
        year, month = self.year, self.current_month()
        pairs = []
        for _ in range(count):
            pairs.append((year, month))
            month -= 1
            if month == 0:
                year, month = year - 1, 12
        return pairs

    def history_start(self, recent: int = 3) -> date:
        """Earliest date needed for YTD plus ``recent`` months of recency."""
        oldest_year, oldest_month = self.recent_months(recent)[-1]
        return min(date(self.year, 1, 1), date(oldest_year, oldest_month, 1))

    def period_end(self) -> date:
        return self.month_range(self.year, self.current_month())[1]
