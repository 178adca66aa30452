"""
User-visible notifications.

Success banners are transient and dismiss themselves after
NOTIFICATION_DISMISS_SECONDS; error banners stay until dismissed.
"""

import asyncio
from typing import Callable, Optional

from logging_config import get_logger
from config import NOTIFICATION_DISMISS_SECONDS
from enums import NotificationLevel
from models import Notification

logger = get_logger(__name__)


class NotificationCenter:
    """Holds the banners currently shown above the page."""

    def __init__(self, dismiss_after: float = NOTIFICATION_DISMISS_SECONDS) -> None:
        self.dismiss_after = dismiss_after
        self.history: list[Notification] = []
        self._listeners: list[Callable[[Notification], None]] = []

    def on_notify(self, listener: Callable[[Notification], None]) -> None:
        """Call listener for every new notification."""
        self._listeners.append(listener)

    @property
    def active(self) -> list[Notification]:
        return [note for note in self.history if not note.dismissed]

    def info(self, message: str) -> Notification:
        """Transient success banner."""
        return self._add(message, NotificationLevel.INFO, transient=True)

    def error(self, message: str) -> Notification:
        """Persistent error banner."""
        return self._add(message, NotificationLevel.ERROR, transient=False)

    def dismiss(self, note: Notification) -> None:
        note.dismissed = True

    def _add(self, message: str, level: NotificationLevel, transient: bool) -> Notification:
        note = Notification(message=message, level=level, transient=transient)
        self.history.append(note)

        if level is NotificationLevel.ERROR:
            logger.warning("%s", message)
        else:
            logger.info("%s", message)

        if transient:
            loop = _running_loop()
            if loop is not None:
                loop.call_later(self.dismiss_after, self.dismiss, note)

        for listener in self._listeners:
            listener(note)

        return note


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None
