from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _env_level(default: int) -> int:
    raw = os.environ.get("TOMATO_LOG_LEVEL", "").strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else default


def setup_logger(
    name: str,
    log_file: Optional[str] = None,
    level: int = logging.INFO,
    console: bool = True,
) -> logging.Logger:
    """Configure and return a module-level logger.

    Handlers are attached once per logger name; calling again returns the same logger.
    Pass ``log_file`` to also write to a file (its directory is created if needed).
    """
    logger = logging.getLogger(name)
    logger.setLevel(_env_level(level))

    if not logger.handlers:
        formatter = logging.Formatter(LOG_FORMAT)
        if log_file:
            os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        if console:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

    return logger
