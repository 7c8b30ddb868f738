from unittest.mock import patch

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

from tomato.ledger import DailyLedger  # noqa: E402
from tomato.plotter import month_figure, show_month_chart  # noqa: E402


def test_month_figure_has_one_bar_per_day():
    ledger = DailyLedger()
    ledger.record_focus_seconds("2024-02-10", 7200)
    fig = month_figure(ledger, 2024, 2, goal_hours=2)
    ax = fig.axes[0]
    heights = [p.get_height() for p in ax.patches]
    assert len(heights) == 29
    assert heights[9] == 2.0
    assert "February 2024" in ax.get_title()
    plt.close(fig)


def test_blocking_chart_waits_for_window():
    with patch("tomato.plotter.plt.show") as show:
        show_month_chart(DailyLedger(), 2024, 2, goal_hours=2, block=True)
    show.assert_called_once_with()
    plt.close("all")
