from tomato.ledger import DailyLedger
from tomato.stats import (
    calendar_days,
    cycle_dots,
    format_clock,
    format_total,
    goal_progress,
    month_summary,
)


def _ledger():
    ledger = DailyLedger()
    ledger.record_focus_seconds("2024-05-01", 3600)
    ledger.record_completed_focus_session("2024-05-01")
    ledger.evaluate_goal("2024-05-01", 1)
    ledger.record_focus_seconds("2024-05-20", 5400)
    ledger.record_completed_focus_session("2024-05-20")
    ledger.record_completed_focus_session("2024-05-20")
    ledger.record_focus_seconds("2024-06-02", 999)
    return ledger


def test_month_summary_only_counts_that_month():
    summary = month_summary(_ledger(), 2024, 5)
    assert summary.total_focus_seconds == 9000
    assert summary.total_hours == 2.5
    assert summary.completed_sessions == 3
    assert summary.goal_days == 1


def test_calendar_grid_starts_on_sunday():
    # May 1st 2024 was a Wednesday
    cells = calendar_days(_ledger(), 2024, 5, today="2024-05-20")
    assert cells[:3] == [None, None, None]
    first = cells[3]
    assert first.day == 1 and first.weekday == 3 and first.has_focus
    assert len(cells) == 3 + 31
    may20 = cells[3 + 19]
    assert may20.is_today
    assert may20.record.completed_sessions == 2
    assert not cells[4].has_focus


def test_goal_progress_is_capped():
    assert goal_progress(0, 12) == 0
    assert goal_progress(1800, 1) == 50
    assert goal_progress(10_000, 1) == 100


def test_cycle_dots_wrap_on_display_count():
    dots = cycle_dots(5, 4)
    assert [d.completed for d in dots] == [True, False, False, False]
    assert [d.milestone for d in dots] == [False, False, False, True]
    assert len(cycle_dots(0, 8)) == 8
    assert [d.milestone for d in cycle_dots(0, 8)].count(True) == 2


def test_formatting():
    assert format_clock(25 * 60) == "25:00"
    assert format_clock(61) == "01:01"
    assert format_total(59) == "0m"
    assert format_total(3 * 3600 + 25 * 60) == "3h 25m"
