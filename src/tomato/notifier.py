"""
Presentation hooks for TOMATO.

The controller calls two fire-and-forget hooks:
- on_session_complete(mode): a countdown reached zero in ``mode``.
- on_goal_achieved(goal_hours): today's focus total just crossed the goal.

DesktopPresenter turns them into desktop notifications via plyer. Delivery happens on a
daemon thread so a slow notification backend never stalls the poll loop.
"""

from __future__ import annotations

import threading
from typing import Protocol

from plyer import notification as plyer_notification  # type: ignore[import-not-found]

from .logging_handler import setup_logger
from .settings import Mode

logger = setup_logger(__name__)

APP_NAME = "TOMATO"

COMPLETION_MESSAGES = {
    Mode.FOCUS: "Focus session complete! Take a break.",
    Mode.SHORT_BREAK: "Short break is over. Time to focus again.",
    Mode.LONG_BREAK: "Long break is over. Start a fresh focus session.",
}


def notify(title: str, message: str, timeout: int = 10) -> None:
    """Send a desktop notification in a non-blocking way."""
    def _do():
        try:
            notify_func = getattr(plyer_notification, "notify", None)
            if callable(notify_func):
                notify_func(title=title, message=message, timeout=timeout, app_name=APP_NAME)  # type: ignore[no-untyped-call]
            else:
                logger.info("%s - %s", title, message)
        except Exception as e:
            # notifications are unavailable on some platforms
            logger.warning("Notification failed: %s", e)

    t = threading.Thread(target=_do, daemon=True)
    t.start()


class Presenter(Protocol):
    def on_session_complete(self, mode: Mode) -> None: ...

    def on_goal_achieved(self, goal_hours: float) -> None: ...


class NullPresenter:
    def on_session_complete(self, mode: Mode) -> None:
        pass

    def on_goal_achieved(self, goal_hours: float) -> None:
        pass


class DesktopPresenter:
    def __init__(self, timeout: int = 10) -> None:
        self.timeout = timeout

    def on_session_complete(self, mode: Mode) -> None:
        notify("Pomodoro timer", COMPLETION_MESSAGES[mode], timeout=self.timeout)

    def on_goal_achieved(self, goal_hours: float) -> None:
        notify(
            "Goal reached!",
            f"You hit your {goal_hours:g}-hour focus goal for today. Well done!",
            timeout=self.timeout,
        )


__all__ = [
    "APP_NAME",
    "COMPLETION_MESSAGES",
    "notify",
    "Presenter",
    "NullPresenter",
    "DesktopPresenter",
]
