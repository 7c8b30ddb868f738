"""
Drift-free countdown for TOMATO.

Remaining time is always re-derived from the anchor timestamp and the current wall clock,
never from a per-tick counter. A poller that was suspended for an hour therefore catches up
in one evaluation instead of replaying thousands of missed ticks.

The engine owns no timer. Callers decide the polling cadence (100ms keeps the observed
completion within one cadence of the real deadline).
"""

from __future__ import annotations

from typing import Optional


def remaining(duration_s: int, anchor_ms: int, now_ms: int) -> int:
    """Seconds left on a countdown of ``duration_s`` started at ``anchor_ms``."""
    elapsed_s = (now_ms - anchor_ms) // 1000
    return max(0, duration_s - elapsed_s)


def has_completed(remaining_s: int) -> bool:
    return remaining_s == 0


class CountdownEngine:
    """Stateful wrapper around :func:`remaining` for one armed countdown.

    Remembers the last observed value so a clock that jumps backwards (``now`` before the
    anchor, or simply earlier than the previous poll) cannot make time flow in reverse:
    the value is clamped to the last known remaining seconds.
    """

    def __init__(self, duration_s: int) -> None:
        self.duration_s = int(duration_s)
        self.anchor_ms: Optional[int] = None
        self._last_remaining: int = self.duration_s

    # ---------- Arming ----------
    def arm(self, anchor_ms: int, remaining_s: Optional[int] = None) -> None:
        """Start (or resume) counting from ``anchor_ms``.

        ``remaining_s`` seeds the clamp value; it defaults to the full duration.
        """
        self.anchor_ms = int(anchor_ms)
        self._last_remaining = self.duration_s if remaining_s is None else int(remaining_s)

    def disarm(self, remaining_s: int) -> None:
        self.anchor_ms = None
        self._last_remaining = int(remaining_s)

    def reload(self, duration_s: int) -> None:
        """Load a new duration and go back to a full, stopped countdown."""
        self.duration_s = int(duration_s)
        self.anchor_ms = None
        self._last_remaining = self.duration_s

    # ---------- Queries ----------
    @property
    def armed(self) -> bool:
        return self.anchor_ms is not None

    @property
    def last_remaining(self) -> int:
        return self._last_remaining

    def remaining(self, now_ms: int) -> int:
        if self.anchor_ms is None:
            return self._last_remaining
        if now_ms < self.anchor_ms:
            # clock set backwards
            return self._last_remaining
        value = min(remaining(self.duration_s, self.anchor_ms, now_ms), self._last_remaining)
        self._last_remaining = value
        return value

    def elapsed_seconds(self, now_ms: int) -> int:
        return self.duration_s - self.remaining(now_ms)

    def deadline_ms(self) -> Optional[int]:
        if self.anchor_ms is None:
            return None
        return self.anchor_ms + self.duration_s * 1000


__all__ = [
    "remaining",
    "has_completed",
    "CountdownEngine",
]
