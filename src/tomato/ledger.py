"""
Per-day focus ledger for TOMATO.

Tracks, for every local calendar date, how many seconds were spent in focus mode, how many
focus sessions were completed, and whether the daily goal was reached.

Contract:
- record_focus_seconds(date, delta): add earned focus seconds to a date.
- record_focus_span(start_ms, seconds): credit a run of consecutive earned seconds, splitting
  it at local midnight so every second lands on the date it was earned.
- record_completed_focus_session(date): bump the completed session count.
- evaluate_goal(date, goal_hours): one-shot; True only on the call that crosses the goal.
- reset_goal(date): re-arm the goal latch (the goal hours changed).

Dates are ``YYYY-MM-DD`` strings in local time produced by :func:`date_key`; the same key is
used for storage, "today" lookups and calendar range queries. Records are never deleted here.
"""

from __future__ import annotations

import calendar
import json
from dataclasses import asdict, dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Optional

from .errors import PersistenceFailure
from .logging_handler import setup_logger

logger = setup_logger(__name__)

HISTORY_KEY = "history"


def date_key(ts_ms: int) -> str:
    """Local calendar date of an epoch-millisecond timestamp."""
    return datetime.fromtimestamp(ts_ms / 1000).strftime("%Y-%m-%d")


def next_midnight_ms(ts_ms: int) -> int:
    """Epoch milliseconds of the first local midnight strictly after ``ts_ms``."""
    day = datetime.fromtimestamp(ts_ms / 1000).date()
    return int(datetime.combine(day + timedelta(days=1), time.min).timestamp() * 1000)


@dataclass
class DailyRecord:
    date: str
    total_focus_seconds: int = 0
    completed_sessions: int = 0
    goal_achieved: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, key: str, raw: Dict[str, Any]) -> "DailyRecord":
        total = int(raw.get("total_focus_seconds", 0))
        sessions = int(raw.get("completed_sessions", 0))
        if total < 0 or sessions < 0:
            raise ValueError("negative counters")
        goal_achieved = raw.get("goal_achieved", False)
        if not isinstance(goal_achieved, bool):
            raise ValueError(f"goal_achieved must be a boolean, got {goal_achieved!r}")
        return cls(
            date=key,
            total_focus_seconds=total,
            completed_sessions=sessions,
            goal_achieved=goal_achieved,
        )


class DailyLedger:
    def __init__(self, records: Optional[Iterable[DailyRecord]] = None) -> None:
        self._records: Dict[str, DailyRecord] = {}
        for rec in records or ():
            self._records[rec.date] = rec

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: object) -> bool:
        return key in self._records

    # ---------- Lookup ----------
    def get(self, key: str) -> Optional[DailyRecord]:
        return self._records.get(key)

    def record_for(self, key: str) -> DailyRecord:
        """Return the record for ``key``, creating an empty one on first access."""
        rec = self._records.get(key)
        if rec is None:
            rec = DailyRecord(date=key)
            self._records[key] = rec
        return rec

    def today(self, now_ms: int) -> DailyRecord:
        return self.record_for(date_key(now_ms))

    def records(self) -> List[DailyRecord]:
        return [self._records[k] for k in sorted(self._records)]

    def records_between(self, start: str, end: str) -> List[DailyRecord]:
        """Records whose date key falls in [start, end], both inclusive."""
        return [r for r in self.records() if start <= r.date <= end]

    def records_in_month(self, year: int, month: int) -> List[DailyRecord]:
        last = calendar.monthrange(year, month)[1]
        return self.records_between(
            date(year, month, 1).isoformat(),
            date(year, month, last).isoformat(),
        )

    # ---------- Accounting ----------
    def record_focus_seconds(self, key: str, delta: int) -> DailyRecord:
        rec = self.record_for(key)
        if delta > 0:
            rec.total_focus_seconds += int(delta)
        return rec

    def record_focus_span(self, start_ms: int, seconds: int) -> Dict[str, int]:
        """Credit ``seconds`` consecutive seconds, the first one starting at ``start_ms``.

        A second belongs to the date in effect when it started. Returns seconds credited per
        date key.
        """
        credited: Dict[str, int] = {}
        cursor = int(start_ms)
        left = int(seconds)
        while left > 0:
            boundary = next_midnight_ms(cursor)
            # seconds whose start lies before the boundary
            fits = -(-(boundary - cursor) // 1000)
            chunk = min(left, fits)
            key = date_key(cursor)
            self.record_focus_seconds(key, chunk)
            credited[key] = credited.get(key, 0) + chunk
            cursor += chunk * 1000
            left -= chunk
        return credited

    def record_completed_focus_session(self, key: str) -> DailyRecord:
        rec = self.record_for(key)
        rec.completed_sessions += 1
        return rec

    def evaluate_goal(self, key: str, goal_hours: float) -> bool:
        rec = self.record_for(key)
        if rec.goal_achieved or rec.total_focus_seconds < goal_hours * 3600:
            return False
        rec.goal_achieved = True
        logger.info("Goal of %sh reached on %s", goal_hours, key)
        return True

    def reset_goal(self, key: str) -> None:
        rec = self._records.get(key)
        if rec is not None:
            rec.goal_achieved = False

    # ---------- Serialization ----------
    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {k: r.to_dict() for k, r in self._records.items()}

    def to_blob(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=True)

    @classmethod
    def from_blob(cls, blob: str) -> "DailyLedger":
        try:
            raw = json.loads(blob)
        except ValueError as e:
            raise PersistenceFailure(HISTORY_KEY, f"not valid JSON ({e})") from e
        if not isinstance(raw, dict):
            raise PersistenceFailure(HISTORY_KEY, "expected a JSON object")
        records: List[DailyRecord] = []
        for key, entry in raw.items():
            try:
                date.fromisoformat(key)
                records.append(DailyRecord.from_dict(key, entry))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("Skipping malformed history entry %r: %s", key, e)
        return cls(records)


__all__ = [
    "HISTORY_KEY",
    "date_key",
    "next_midnight_ms",
    "DailyRecord",
    "DailyLedger",
]
