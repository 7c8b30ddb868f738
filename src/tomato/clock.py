"""Wall-clock sources. Everything in TOMATO measures time in epoch milliseconds."""

from __future__ import annotations

import time
from typing import Protocol


class ClockSource(Protocol):
    def now(self) -> int: ...


class SystemClock:
    """Real wall clock. Not monotonic: suspension time must show up in it."""

    def now(self) -> int:
        return int(time.time() * 1000)


class ManualClock:
    """Clock that only moves when told to. Used by tests and replays."""

    def __init__(self, start_ms: int = 0) -> None:
        self._now = int(start_ms)

    def now(self) -> int:
        return self._now

    def set(self, ms: int) -> None:
        self._now = int(ms)

    def advance(self, ms: int) -> int:
        self._now += int(ms)
        return self._now


__all__ = ["ClockSource", "SystemClock", "ManualClock"]
