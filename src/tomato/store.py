"""
Key-value persistence for TOMATO.

The core only ever calls ``load(key)`` and ``save(key, blob)`` with opaque string blobs; two
keys are used, ``settings`` and ``history``. Stores raise PersistenceFailure and leave it to
the caller to decide what a failure means (for TOMATO: fall back to defaults, keep going).

JsonFileStore keeps one ``<key>.json`` file per key with atomic writes (write to a temp file,
then ``os.replace``), so a crash mid-write never leaves a truncated file behind.
"""

from __future__ import annotations

import os
import re
from typing import Dict, Optional, Protocol

from .errors import PersistenceFailure

DEFAULT_HOME = os.path.join(os.path.expanduser("~"), ".tomato")

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


def data_dir() -> str:
    """Data directory, overridable with the TOMATO_HOME environment variable."""
    return os.environ.get("TOMATO_HOME") or DEFAULT_HOME


class KeyValueStore(Protocol):
    def load(self, key: str) -> Optional[str]: ...

    def save(self, key: str, blob: str) -> bool: ...


class MemoryStore:
    """Dict-backed store for tests and throwaway runs."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def save(self, key: str, blob: str) -> bool:
        self.data[key] = blob
        return True


class JsonFileStore:
    def __init__(self, root: Optional[str] = None) -> None:
        self.root = root or data_dir()

    def path_for(self, key: str) -> str:
        if not _KEY_RE.match(key):
            raise PersistenceFailure(key, "invalid key")
        return os.path.join(self.root, f"{key}.json")

    def load(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceFailure(key, f"read failed ({e})") from e

    def save(self, key: str, blob: str) -> bool:
        path = self.path_for(key)
        tmp = path + ".tmp"
        try:
            os.makedirs(self.root, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(blob)
            os.replace(tmp, path)
        except OSError as e:
            raise PersistenceFailure(key, f"write failed ({e})") from e
        return True


__all__ = [
    "DEFAULT_HOME",
    "data_dir",
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
]
