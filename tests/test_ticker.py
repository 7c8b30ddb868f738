import time
from unittest.mock import patch

from tomato.clock import ManualClock
from tomato.controller import TomatoController
from tomato.ticker import Ticker, TickerConfig

T0 = 1_700_000_000_000


def _setup(tick_ms=10):
    clock = ManualClock(T0)
    ctl = TomatoController(clock=clock)
    ticker = Ticker(ctl, TickerConfig(tick_ms=tick_ms, suspend_gap_ms=2000))
    return clock, ctl, ticker


def test_ticker_follows_running_flag():
    _, ctl, ticker = _setup()
    assert not ticker.alive
    ctl.start()
    assert ticker.alive
    ctl.pause()
    assert not ticker.alive
    ticker.stop(join=True)


def test_ticker_thread_polls_controller():
    _, ctl, ticker = _setup()
    with patch.object(ctl, "poll", wraps=ctl.poll) as poll:
        ctl.start()
        deadline = time.time() + 2
        while poll.call_count < 3 and time.time() < deadline:
            time.sleep(0.01)
        ticker.stop(join=True)
    assert poll.call_count >= 3


def test_gap_between_ticks_is_treated_as_resume():
    clock, ctl, ticker = _setup()
    ticker._last_tick_ms = clock.now()
    with patch.object(ctl, "on_resume", wraps=ctl.on_resume) as on_resume:
        clock.advance(100)
        ticker.tick()
        on_resume.assert_not_called()
        clock.advance(60_000)
        ticker.tick()
        on_resume.assert_called_once()


def test_completion_without_auto_start_stops_ticker():
    clock, ctl, ticker = _setup()
    ctl.update_settings(auto_start_breaks=False)
    ctl.start()
    assert ticker.alive
    clock.advance(25 * 60_000)
    ticker.tick()
    assert not ctl.running
    assert not ticker.alive
    ticker.stop(join=True)


def test_stale_snapshot_does_not_stop_a_running_ticker():
    _, ctl, ticker = _setup()
    stale = ctl.snapshot()
    ctl.start()
    ticker._on_change(stale)
    assert ctl.running
    assert ticker.alive
    ctl.pause()
    ticker._on_change(ctl.snapshot())
    assert not ticker.alive
    ticker.stop(join=True)
