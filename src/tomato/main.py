"""
Headless TOMATO runner.

Loads settings and history from the data directory (``TOMATO_HOME`` or ``~/.tomato``) and
reads one-letter commands from stdin: Enter toggles start/pause, ``r`` resets, ``f`` / ``s``
/ ``l`` pick focus, short break or long break, ``q`` quits. Desktop notifications announce
each completed period and the daily goal.

Flags:
  --chart   show this month's focus chart and exit
  --month   print this month's calendar and totals and exit
  --quiet   no desktop notifications
"""

from __future__ import annotations

import calendar
import os
import signal
import sys
from datetime import date
from typing import List, Optional

from .controller import TomatoController
from .logging_handler import setup_logger
from .notifier import DesktopPresenter, NullPresenter
from .session import SessionSnapshot
from .settings import Mode, required_cycles
from .stats import (
    calendar_days,
    cycle_dots,
    format_clock,
    format_total,
    goal_progress,
    month_summary,
)
from .store import JsonFileStore
from .ticker import Ticker, TickerConfig

logger = setup_logger(__name__)

MODE_KEYS = {"f": Mode.FOCUS, "s": Mode.SHORT_BREAK, "l": Mode.LONG_BREAK}


def status_line(controller: TomatoController, snap: SessionSnapshot) -> str:
    today = controller.today()
    settings = controller.settings
    state = "running" if snap.running else "paused"
    dots = "".join("*" if d.completed else "." for d in cycle_dots(snap.cycle_count, settings.cycle_display_count))
    line = (
        f"{snap.mode.label} {format_clock(snap.remaining_s)} ({state}) | "
        f"session #{snap.cycle_count + 1} [{dots}] | today {format_total(today.total_focus_seconds)}, "
        f"{goal_progress(today.total_focus_seconds, settings.goal_hours)}% of goal "
        f"({today.completed_sessions}/{required_cycles(settings.goal_hours, settings.focus_minutes)} sessions)"
    )
    if snap.mode is Mode.FOCUS and controller.machine.next_is_long_break():
        line += " | long break next"
    return line


def month_report(controller: TomatoController, year: int, month: int) -> List[str]:
    """Sunday-first calendar of focus time for one month, followed by the month totals."""
    today = date.today().isoformat()
    lines = [
        f"{calendar.month_name[month]} {year}",
        " ".join(f"{name:>7}" for name in ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")),
    ]
    week: List[str] = []
    for cell in calendar_days(controller.ledger, year, month, today=today):
        if cell is None:
            week.append(" " * 7)
        else:
            mark = "!" if cell.record is not None and cell.record.goal_achieved else ("<" if cell.is_today else " ")
            # focus hours, one decimal
            spent = f"{cell.record.total_focus_seconds / 3600:.1f}" if cell.has_focus else ""
            week.append(f"{cell.day:2d}{mark}{spent:>4}")
        if len(week) == 7:
            lines.append(" ".join(week))
            week = []
    if week:
        lines.append(" ".join(week))
    summary = month_summary(controller.ledger, year, month)
    lines.append(
        f"Total {summary.total_hours}h | {summary.completed_sessions} sessions | "
        f"goal reached on {summary.goal_days} day(s)"
    )
    return lines


def build_controller(quiet: bool = False) -> TomatoController:
    store = JsonFileStore()
    presenter = NullPresenter() if quiet else DesktopPresenter()
    return TomatoController(store=store, presenter=presenter)


def run(controller: TomatoController, cfg: Optional[TickerConfig] = None) -> int:
    ticker = Ticker(controller, cfg)

    def _on_cont(signum, frame):
        controller.on_resume()

    if hasattr(signal, "SIGCONT"):
        signal.signal(signal.SIGCONT, _on_cont)

    logger.info("TOMATO ready, data in %s", getattr(controller.store, "root", "memory"))
    logger.info(status_line(controller, controller.snapshot()))
    try:
        for raw in sys.stdin:
            cmd = raw.strip().lower()
            if cmd == "q":
                break
            if cmd == "":
                controller.toggle_running()
            elif cmd == "r":
                controller.reset()
            elif cmd in MODE_KEYS:
                if not controller.switch_mode(MODE_KEYS[cmd]):
                    logger.info("Pause the timer before switching modes")
            else:
                logger.info("Commands: Enter=start/pause, r=reset, f/s/l=mode, q=quit")
            logger.info(status_line(controller, controller.snapshot()))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        ticker.stop(join=True)
        controller.shutdown()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    quiet = "--quiet" in args or os.environ.get("TOMATO_QUIET", "") == "1"
    controller = build_controller(quiet=quiet)

    if "--chart" in args:
        from .plotter import show_month_chart

        today = date.today()
        show_month_chart(controller.ledger, today.year, today.month, controller.settings.goal_hours, block=True)
        return 0

    if "--month" in args:
        today = date.today()
        for line in month_report(controller, today.year, today.month):
            print(line)
        return 0

    return run(controller)


if __name__ == "__main__":
    sys.exit(main())
