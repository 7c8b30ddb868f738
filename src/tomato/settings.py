"""
User settings for TOMATO.

Settings are a flat record persisted as JSON under the ``settings`` key:

{
  "focus_minutes": 25,
  "short_break_minutes": 5,
  "long_break_minutes": 15,
  "auto_start_breaks": true,
  "auto_start_focus": false,
  "goal_hours": 12,
  "cycle_display_count": 4
}

Unknown keys are ignored and missing keys take their defaults, so older files keep loading.
"""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from typing import Any, Dict

from .errors import InvalidSettings, PersistenceFailure

SETTINGS_KEY = "settings"


class Mode(str, Enum):
    FOCUS = "focus"
    SHORT_BREAK = "shortBreak"
    LONG_BREAK = "longBreak"

    @property
    def is_break(self) -> bool:
        return self is not Mode.FOCUS

    @property
    def label(self) -> str:
        return {
            Mode.FOCUS: "Focus",
            Mode.SHORT_BREAK: "Short break",
            Mode.LONG_BREAK: "Long break",
        }[self]


@dataclass(frozen=True)
class Settings:
    focus_minutes: int = 25
    short_break_minutes: int = 5
    long_break_minutes: int = 15
    auto_start_breaks: bool = True
    auto_start_focus: bool = False
    goal_hours: float = 12
    cycle_display_count: int = 4

    def validate(self) -> "Settings":
        """Return self if every value is usable, else raise InvalidSettings."""
        for name in ("focus_minutes", "short_break_minutes", "long_break_minutes", "cycle_display_count"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidSettings(f"{name} must be a positive integer, got {value!r}")
        goal = self.goal_hours
        if isinstance(goal, bool) or not isinstance(goal, (int, float)) or not math.isfinite(goal) or goal <= 0:
            raise InvalidSettings(f"goal_hours must be a positive number, got {goal!r}")
        for name in ("auto_start_breaks", "auto_start_focus"):
            if not isinstance(getattr(self, name), bool):
                raise InvalidSettings(f"{name} must be a boolean")
        return self

    def duration_seconds(self, mode: Mode) -> int:
        minutes = {
            Mode.FOCUS: self.focus_minutes,
            Mode.SHORT_BREAK: self.short_break_minutes,
            Mode.LONG_BREAK: self.long_break_minutes,
        }[mode]
        return int(minutes * 60)

    @property
    def goal_seconds(self) -> float:
        return self.goal_hours * 3600

    def with_changes(self, **changes: Any) -> "Settings":
        return replace(self, **changes).validate()

    # ---------- Serialization ----------
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_blob(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Settings":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in raw.items() if k in known}).validate()

    @classmethod
    def from_blob(cls, blob: str) -> "Settings":
        try:
            raw = json.loads(blob)
        except ValueError as e:
            raise PersistenceFailure(SETTINGS_KEY, f"not valid JSON ({e})") from e
        if not isinstance(raw, dict):
            raise PersistenceFailure(SETTINGS_KEY, "expected a JSON object")
        try:
            return cls.from_dict(raw)
        except (InvalidSettings, TypeError) as e:
            raise PersistenceFailure(SETTINGS_KEY, str(e)) from e


def required_cycles(goal_hours: float, focus_minutes: int) -> int:
    """Focus sessions needed to reach the daily goal."""
    return math.ceil(goal_hours * 60 / focus_minutes)


__all__ = [
    "SETTINGS_KEY",
    "Mode",
    "Settings",
    "required_cycles",
]
