from __future__ import annotations

import calendar
from datetime import date

import matplotlib.pyplot as plt

from .ledger import DailyLedger


def month_figure(ledger: DailyLedger, year: int, month: int, goal_hours: float):
    """Bar chart of focus hours per day for one month, with the daily goal as a line."""
    days = range(1, calendar.monthrange(year, month)[1] + 1)
    hours = []
    colors = []
    for day in days:
        rec = ledger.get(date(year, month, day).isoformat())
        hours.append(rec.total_focus_seconds / 3600 if rec else 0.0)
        colors.append("#2ecc71" if rec and rec.goal_achieved else "#e67e22")

    fig, ax = plt.subplots()  # type: ignore[call-arg]
    ax.bar(list(days), hours, color=colors)
    ax.axhline(goal_hours, color="#8e44ad", linestyle="--", linewidth=1, label=f"Goal ({goal_hours:g}h)")
    ax.set_xlabel("Day")  # type: ignore[call-arg]
    ax.set_ylabel("Focus hours")  # type: ignore[call-arg]
    ax.set_title(f"TOMATO focus record - {calendar.month_name[month]} {year}")  # type: ignore[call-arg]
    ax.legend(loc="upper right")
    return fig


def show_month_chart(ledger: DailyLedger, year: int, month: int, goal_hours: float, block: bool = False) -> None:
    """Show the month chart.

    Pass ``block=True`` when no GUI event loop is running (headless runner); the call then
    returns once the window is closed.
    """
    month_figure(ledger, year, month, goal_hours)
    if block:
        plt.show()  # type: ignore[call-arg]
        return
    try:
        plt.show(block=False)  # type: ignore[call-arg]
    except TypeError:
        # Older Matplotlib versions may not support block kwarg; fallback
        plt.show()  # type: ignore[call-arg]
