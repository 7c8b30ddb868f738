"""
Read-only views over the ledger: calendar month, goal progress, cycle dots, formatting.

Nothing here mutates state; presentation layers call these with the ledger and settings.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from .ledger import DailyLedger, DailyRecord
from .session import LONG_BREAK_EVERY


@dataclass(frozen=True)
class MonthSummary:
    year: int
    month: int
    total_focus_seconds: int
    completed_sessions: int
    goal_days: int

    @property
    def total_hours(self) -> float:
        return round(self.total_focus_seconds / 3600, 1)


@dataclass(frozen=True)
class CalendarDay:
    day: int
    key: str
    record: Optional[DailyRecord]
    is_today: bool

    @property
    def has_focus(self) -> bool:
        return self.record is not None and self.record.total_focus_seconds > 0

    @property
    def weekday(self) -> int:
        """0 = Sunday ... 6 = Saturday."""
        return (date.fromisoformat(self.key).weekday() + 1) % 7


@dataclass(frozen=True)
class CycleDot:
    completed: bool
    milestone: bool


def month_summary(ledger: DailyLedger, year: int, month: int) -> MonthSummary:
    records = ledger.records_in_month(year, month)
    return MonthSummary(
        year=year,
        month=month,
        total_focus_seconds=sum(r.total_focus_seconds for r in records),
        completed_sessions=sum(r.completed_sessions for r in records),
        goal_days=sum(1 for r in records if r.goal_achieved),
    )


def calendar_days(ledger: DailyLedger, year: int, month: int, today: Optional[str] = None) -> List[Optional[CalendarDay]]:
    """Grid cells for a Sunday-first month view; leading ``None`` cells pad the first week."""
    first_weekday, days_in_month = calendar.monthrange(year, month)
    leading = (first_weekday + 1) % 7
    cells: List[Optional[CalendarDay]] = [None] * leading
    for day in range(1, days_in_month + 1):
        key = date(year, month, day).isoformat()
        cells.append(CalendarDay(day=day, key=key, record=ledger.get(key), is_today=key == today))
    return cells


def goal_progress(total_focus_seconds: int, goal_hours: float) -> int:
    """Percent of the daily goal reached, capped at 100."""
    goal_seconds = goal_hours * 3600
    if goal_seconds <= 0:
        return 100
    return min(100, round(total_focus_seconds / goal_seconds * 100))


def cycle_dots(cycle_count: int, display_count: int) -> List[CycleDot]:
    done = cycle_count % display_count
    return [
        CycleDot(completed=i < done, milestone=(i + 1) % LONG_BREAK_EVERY == 0)
        for i in range(display_count)
    ]


def format_clock(seconds: int) -> str:
    """Countdown display, MM:SS."""
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins:02d}:{secs:02d}"


def format_total(seconds: int) -> str:
    hours, rest = divmod(max(0, int(seconds)), 3600)
    mins = rest // 60
    return f"{hours}h {mins}m" if hours > 0 else f"{mins}m"


__all__ = [
    "MonthSummary",
    "CalendarDay",
    "CycleDot",
    "month_summary",
    "calendar_days",
    "goal_progress",
    "cycle_dots",
    "format_clock",
    "format_total",
]
