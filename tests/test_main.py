"""
Tests for the headless runner's one-shot reports.

Usage:
    python -m pytest tests/test_main.py -v
"""

from datetime import date
from unittest.mock import patch

from tomato.controller import TomatoController
from tomato.main import main, month_report


def _february():
    ctl = TomatoController()
    ctl.ledger.record_focus_seconds("2024-02-10", 5400)
    ctl.ledger.record_completed_focus_session("2024-02-10")
    ctl.ledger.record_completed_focus_session("2024-02-10")
    ctl.ledger.evaluate_goal("2024-02-10", 1)
    ctl.ledger.record_focus_seconds("2024-02-12", 1800)
    return ctl


def test_month_report_lays_out_sunday_first_weeks():
    lines = month_report(_february(), 2024, 2)
    assert lines[0] == "February 2024"
    assert lines[1].split() == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
    # 1 February 2024 is a Thursday
    assert lines[2].startswith(" ".join([" " * 7] * 4) + "  1")
    assert lines[3].endswith("10! 1.5")
    assert "12  0.5" in lines[4]
    # five weeks plus header lines and totals
    assert len(lines) == 8


def test_month_report_totals():
    lines = month_report(_february(), 2024, 2)
    assert lines[-1] == "Total 2.0h | 2 sessions | goal reached on 1 day(s)"


def test_month_flag_prints_current_month(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("TOMATO_HOME", str(tmp_path))
    assert main(["--month", "--quiet"]) == 0
    out = capsys.readouterr().out
    today = date.today()
    assert out.splitlines()[0].endswith(str(today.year))
    assert "Total 0.0h | 0 sessions" in out


def test_chart_flag_blocks_until_window_closes(tmp_path, monkeypatch):
    monkeypatch.setenv("TOMATO_HOME", str(tmp_path))
    with patch("tomato.plotter.show_month_chart") as show:
        assert main(["--chart", "--quiet"]) == 0
    assert show.call_args.kwargs["block"] is True
