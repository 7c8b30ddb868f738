"""Error taxonomy for TOMATO.

None of these are fatal: stores raise them, the controller absorbs them.
"""

from __future__ import annotations


class TomatoError(Exception):
    """Base class for all TOMATO errors."""


class PersistenceFailure(TomatoError):
    """A load or save against the key-value store failed or returned malformed data."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"{key}: {reason}")
        self.key = key
        self.reason = reason


class InvalidSettings(TomatoError, ValueError):
    """A configured duration or goal value is not usable."""


__all__ = [
    "TomatoError",
    "PersistenceFailure",
    "InvalidSettings",
]
