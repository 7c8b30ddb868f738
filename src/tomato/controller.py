"""
TOMATO controller: the single owner of timer state.

Wires the session state machine, the daily ledger, settings, persistence and presentation
together. Every mutation goes through one of the public methods below and follows the same
path under one lock:

  1. credit focus seconds earned since the last accounting point to the ledger
  2. let the state machine handle a countdown that reached zero
  3. evaluate today's goal
  4. persist whatever changed (failures are logged, never raised)
  5. tell change listeners (the ticker, a UI) about the new snapshot

Step 1 always runs before step 2, so the last seconds of a focus session are never lost.

Focus accounting is derived from the same anchor timestamp as the countdown: the number of
seconds the countdown has consumed minus the seconds already credited. A poller that was
suspended catches up in one call, and the credited seconds are split at local midnight.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, List, Optional

from .clock import ClockSource, SystemClock
from .errors import InvalidSettings, PersistenceFailure
from .ledger import HISTORY_KEY, DailyLedger, DailyRecord, date_key
from .logging_handler import setup_logger
from .notifier import NullPresenter, Presenter
from .session import SessionSnapshot, SessionStateMachine
from .settings import SETTINGS_KEY, Mode, Settings
from .store import KeyValueStore, MemoryStore

logger = setup_logger(__name__)

ChangeListener = Callable[[SessionSnapshot], None]


class TomatoController:
    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        presenter: Optional[Presenter] = None,
        clock: Optional[ClockSource] = None,
    ) -> None:
        self.store: KeyValueStore = store if store is not None else MemoryStore()
        self.presenter: Presenter = presenter if presenter is not None else NullPresenter()
        self.clock: ClockSource = clock if clock is not None else SystemClock()

        self._lock = threading.RLock()
        self._listeners: List[ChangeListener] = []

        self.settings: Settings = self._load_settings()
        self.ledger: DailyLedger = self._load_ledger()
        # continue today's cycle
        today = self.ledger.get(date_key(self.clock.now()))
        self.machine = SessionStateMachine(
            self.settings,
            on_complete=self._on_session_complete,
            cycle_count=today.completed_sessions if today else 0,
        )

        # focus seconds of the current countdown already in the ledger
        self._credited_s: int = 0

    # ---------- Listeners ----------
    def on_change(self, cb: ChangeListener) -> None:
        """Register a callback receiving a SessionSnapshot after every poll or mutation."""
        self._listeners.append(cb)

    def _emit(self, snap: SessionSnapshot) -> None:
        for cb in list(self._listeners):
            try:
                cb(snap)
            except Exception:
                logger.exception("Change listener failed")

    # ---------- Queries ----------
    @property
    def running(self) -> bool:
        return self.machine.running

    @property
    def mode(self) -> Mode:
        return self.machine.mode

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return self.machine.snapshot(self.clock.now())

    def today(self) -> DailyRecord:
        with self._lock:
            rec = self.ledger.today(self.clock.now())
            return DailyRecord(**rec.to_dict())

    # ---------- Poll path ----------
    def poll(self) -> SessionSnapshot:
        """Re-derive remaining time, account focus seconds and handle completion."""
        with self._lock:
            snap = self._poll_locked(self.clock.now())
        self._emit(snap)
        return snap

    def on_resume(self) -> SessionSnapshot:
        """Catch up right after the process was suspended (sleep, backgrounding)."""
        logger.info("Resumed from suspension, re-evaluating countdown")
        return self.poll()

    def _poll_locked(self, now: int) -> SessionSnapshot:
        touched = self._account_focus(now)
        finished = self.machine.on_countdown_complete(now)
        if finished is not None:
            self._credited_s = 0
        if touched or finished is not None:
            for key in sorted(set(touched) | {date_key(now)}):
                self._check_goal(key)
            self._save_history()
        return self.machine.snapshot(now)

    def _account_focus(self, now: int) -> List[str]:
        """Credit newly earned focus seconds; returns the date keys that changed."""
        machine = self.machine
        if machine.mode is not Mode.FOCUS or not machine.running or machine.anchor_ms is None:
            return []
        earned = machine.elapsed_seconds(now)
        delta = earned - self._credited_s
        if delta <= 0:
            return []
        start = machine.anchor_ms + self._credited_s * 1000
        credited = self.ledger.record_focus_span(start, delta)
        self._credited_s = earned
        return list(credited)

    def _on_session_complete(self, mode: Mode) -> None:
        if mode is Mode.FOCUS:
            deadline = self.machine.deadline_ms()
            when = deadline if deadline is not None else self.clock.now()
            self.ledger.record_completed_focus_session(date_key(when))
        logger.info("%s session complete", mode.label)
        try:
            self.presenter.on_session_complete(mode)
        except Exception:
            logger.exception("Presenter failed on session complete")

    def _check_goal(self, key: str) -> None:
        goal = self.settings.goal_hours
        if self.ledger.evaluate_goal(key, goal):
            try:
                self.presenter.on_goal_achieved(goal)
            except Exception:
                logger.exception("Presenter failed on goal achieved")

    # ---------- Controls ----------
    def toggle_running(self) -> bool:
        """Start or pause the countdown; returns the new running flag."""
        with self._lock:
            now = self.clock.now()
            self._poll_locked(now)
            self.machine.toggle_running(now)
            snap = self.machine.snapshot(now)
        self._emit(snap)
        return snap.running

    def start(self) -> None:
        if not self.running:
            self.toggle_running()

    def pause(self) -> None:
        if self.running:
            self.toggle_running()

    def reset(self) -> None:
        with self._lock:
            now = self.clock.now()
            self._poll_locked(now)
            self.machine.reset()
            self._credited_s = 0
            snap = self.machine.snapshot(now)
        self._emit(snap)

    def switch_mode(self, target: Mode) -> bool:
        """Manually pick a mode. Refused while a countdown is running."""
        with self._lock:
            if self.machine.running:
                logger.info("Ignoring mode switch to %s while running", Mode(target).value)
                return False
            now = self.clock.now()
            self.machine.switch_mode(target, False, now)
            self._credited_s = 0
            snap = self.machine.snapshot(now)
        self._emit(snap)
        return True

    def update_settings(self, settings: Optional[Settings] = None, **changes: Any) -> bool:
        """Apply new settings. Invalid values are rejected and the old settings kept.

        The current countdown is reloaded with the new duration and paused; progress on it is
        discarded. Changing the goal re-arms today's goal notification.
        """
        try:
            new = (settings or self.settings).with_changes(**changes)
        except (InvalidSettings, TypeError) as e:
            logger.warning("Rejected settings update: %s", e)
            return False

        with self._lock:
            now = self.clock.now()
            self._poll_locked(now)
            old_goal = self.settings.goal_hours
            self.settings = new
            self.machine.update_settings(new)
            self._credited_s = 0
            self._save(SETTINGS_KEY, new.to_blob())
            if new.goal_hours != old_goal:
                self.ledger.reset_goal(date_key(now))
                self._check_goal(date_key(now))
                self._save_history()
            snap = self.machine.snapshot(now)
        logger.info("Settings updated: %s", new.to_dict())
        self._emit(snap)
        return True

    def shutdown(self) -> None:
        """Flush focus time earned so far and persist everything."""
        with self._lock:
            now = self.clock.now()
            self._poll_locked(now)
            self._save(SETTINGS_KEY, self.settings.to_blob())
            self._save_history()

    # ---------- Persistence ----------
    def _load_settings(self) -> Settings:
        try:
            blob = self.store.load(SETTINGS_KEY)
            if blob is None:
                return Settings()
            return Settings.from_blob(blob)
        except PersistenceFailure as e:
            logger.warning("Could not load settings, using defaults: %s", e)
            return Settings()

    def _load_ledger(self) -> DailyLedger:
        try:
            blob = self.store.load(HISTORY_KEY)
            if blob is None:
                return DailyLedger()
            return DailyLedger.from_blob(blob)
        except PersistenceFailure as e:
            logger.warning("Could not load history, starting empty: %s", e)
            return DailyLedger()

    def _save_history(self) -> None:
        self._save(HISTORY_KEY, self.ledger.to_blob())

    def _save(self, key: str, blob: str) -> None:
        try:
            if not self.store.save(key, blob):
                logger.warning("Store refused to save %s", key)
        except PersistenceFailure as e:
            logger.warning("Could not save %s: %s", key, e)


__all__ = ["TomatoController"]
