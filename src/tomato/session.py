"""
Session state machine for TOMATO.

States are (mode x running): focus, short break and long break, each either running or
paused. The machine starts in (focus, paused).

Transitions:
- toggle_running(now): pause freezes remaining time; resume re-anchors so time already spent
  is kept.
- reset(): full duration for the current mode, paused.
- switch_mode(target, auto_start, now): load the target's duration; when auto-starting the
  anchor is set to ``now`` right away.
- on_countdown_complete(now): focus -> short break (long break every 4th focus session),
  break -> focus. Fires the completion callback once per countdown.
- update_settings(settings): reload the current duration and pause. Progress on the running
  countdown is discarded, not prorated.

All time arguments are epoch milliseconds supplied by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .countdown import CountdownEngine, has_completed
from .logging_handler import setup_logger
from .settings import Mode, Settings

logger = setup_logger(__name__)

LONG_BREAK_EVERY = 4


@dataclass(frozen=True)
class SessionSnapshot:
    mode: Mode
    running: bool
    remaining_s: int
    duration_s: int
    cycle_count: int
    anchor_ms: Optional[int]

    @property
    def progress(self) -> float:
        """Fraction of the current countdown already elapsed, 0.0 - 1.0."""
        if self.duration_s <= 0:
            return 0.0
        return (self.duration_s - self.remaining_s) / self.duration_s


class SessionStateMachine:
    def __init__(
        self,
        settings: Settings,
        on_complete: Optional[Callable[[Mode], None]] = None,
        cycle_count: int = 0,
    ) -> None:
        self.settings = settings
        self.on_complete = on_complete
        self.mode: Mode = Mode.FOCUS
        self.cycle_count: int = max(0, int(cycle_count))

        duration = settings.duration_seconds(self.mode)
        self._engine = CountdownEngine(duration)
        self._remaining_at_pause: int = duration

        # one-shot completion latch: a countdown generation is handled at most once
        self._generation: int = 0
        self._handled_generation: Optional[int] = None

    # ---------- Queries ----------
    @property
    def running(self) -> bool:
        return self._engine.armed

    @property
    def anchor_ms(self) -> Optional[int]:
        return self._engine.anchor_ms

    @property
    def configured_duration_s(self) -> int:
        return self._engine.duration_s

    @property
    def remaining_at_pause(self) -> int:
        return self._remaining_at_pause

    @property
    def completion_handled(self) -> bool:
        return self._handled_generation == self._generation

    def remaining(self, now_ms: int) -> int:
        if not self.running:
            return self._remaining_at_pause
        return self._engine.remaining(now_ms)

    def elapsed_seconds(self, now_ms: int) -> int:
        return self.configured_duration_s - self.remaining(now_ms)

    def deadline_ms(self) -> Optional[int]:
        return self._engine.deadline_ms()

    def next_is_long_break(self) -> bool:
        return self.cycle_count % LONG_BREAK_EVERY == LONG_BREAK_EVERY - 1

    def snapshot(self, now_ms: int) -> SessionSnapshot:
        return SessionSnapshot(
            mode=self.mode,
            running=self.running,
            remaining_s=self.remaining(now_ms),
            duration_s=self.configured_duration_s,
            cycle_count=self.cycle_count,
            anchor_ms=self.anchor_ms,
        )

    # ---------- Transitions ----------
    def toggle_running(self, now_ms: int) -> bool:
        """Flip running/paused and return the new running flag."""
        if self.running:
            self.pause(now_ms)
        else:
            self.start(now_ms)
        return self.running

    def start(self, now_ms: int) -> None:
        if self.running:
            return
        already_spent = self.configured_duration_s - self._remaining_at_pause
        self._engine.arm(now_ms - already_spent * 1000, self._remaining_at_pause)
        logger.debug("%s started, %ss left", self.mode.value, self._remaining_at_pause)

    def pause(self, now_ms: int) -> None:
        if not self.running:
            return
        self._remaining_at_pause = self._engine.remaining(now_ms)
        self._engine.disarm(self._remaining_at_pause)
        logger.debug("%s paused, %ss left", self.mode.value, self._remaining_at_pause)

    def reset(self) -> None:
        self._engine.reload(self.settings.duration_seconds(self.mode))
        self._remaining_at_pause = self.configured_duration_s
        self._generation += 1

    def switch_mode(self, target: Mode, auto_start: bool, now_ms: int) -> None:
        self.mode = Mode(target)
        self.reset()
        if auto_start:
            self._engine.arm(now_ms)
        logger.info(
            "Switched to %s (%ss)%s",
            self.mode.value,
            self.configured_duration_s,
            ", auto-started" if auto_start else "",
        )

    def on_countdown_complete(self, now_ms: int) -> Optional[Mode]:
        """Advance to the next mode if the current countdown has reached zero.

        Returns the mode that just completed, or None when there was nothing to do (not yet
        at zero, or this countdown's completion was already handled).
        """
        if self.completion_handled or not has_completed(self.remaining(now_ms)):
            return None
        self._handled_generation = self._generation
        finished = self.mode

        if self.on_complete is not None:
            try:
                self.on_complete(finished)
            except Exception:
                logger.exception("Completion callback failed for %s", finished.value)

        if finished is Mode.FOCUS:
            self.cycle_count += 1
            target = Mode.LONG_BREAK if self.cycle_count % LONG_BREAK_EVERY == 0 else Mode.SHORT_BREAK
            self.switch_mode(target, self.settings.auto_start_breaks, now_ms)
        else:
            self.switch_mode(Mode.FOCUS, self.settings.auto_start_focus, now_ms)
        return finished

    def update_settings(self, settings: Settings) -> None:
        self.settings = settings
        self.reset()


__all__ = [
    "LONG_BREAK_EVERY",
    "SessionSnapshot",
    "SessionStateMachine",
]
