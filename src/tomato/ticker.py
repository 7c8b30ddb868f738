"""
Poll driver for TOMATO.

A daemon thread that calls ``controller.poll()`` every ``tick_ms`` while the countdown runs.
It subscribes to controller changes: it starts when a countdown starts and stops as soon as
the controller reports ``running == False``, so a stale ticker never touches a countdown
that a mode switch already replaced.

Suspension (laptop sleep, SIGSTOP) shows up as a gap between two ticks far larger than the
cadence, measured on the controller's wall clock (the monotonic clock stops during
system sleep on some platforms). The next tick then goes through
``controller.on_resume()`` instead of a plain poll.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

from .controller import TomatoController
from .logging_handler import setup_logger
from .session import SessionSnapshot

logger = setup_logger(__name__)


@dataclass
class TickerConfig:
    tick_ms: int = 100  # poll cadence
    suspend_gap_ms: int = 2000  # a gap this long between ticks means we were suspended


class Ticker:
    def __init__(self, controller: TomatoController, cfg: Optional[TickerConfig] = None) -> None:
        self.controller = controller
        self.cfg = cfg or TickerConfig()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last_tick_ms: Optional[int] = None
        controller.on_change(self._on_change)

    @property
    def alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()

    def start(self) -> None:
        if self.alive:
            return
        self._stop_event = threading.Event()
        self._last_tick_ms = self.controller.clock.now()
        self._thread = threading.Thread(target=self._run, args=(self._stop_event,), daemon=True)
        self._thread.start()
        logger.debug("Ticker started (%sms)", self.cfg.tick_ms)

    def stop(self, join: bool = False) -> None:
        self._stop_event.set()
        thread = self._thread
        if join and thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)
        logger.debug("Ticker stopped")

    def _on_change(self, snap: SessionSnapshot) -> None:
        # snapshots are delivered outside the controller lock and may be stale
        if self.controller.running:
            self.start()
        else:
            self.stop()

    def _run(self, stop_event: threading.Event) -> None:
        interval = max(0.01, self.cfg.tick_ms / 1000.0)
        while not stop_event.wait(interval):
            self.tick()

    def tick(self) -> SessionSnapshot:
        """One poll; routes through on_resume when a suspension gap is detected."""
        now = self.controller.clock.now()
        last = self._last_tick_ms
        self._last_tick_ms = now
        if last is not None and now - last >= self.cfg.suspend_gap_ms:
            return self.controller.on_resume()
        return self.controller.poll()


__all__ = ["TickerConfig", "Ticker"]
