"""Notification and navigation collaborators used by the settings workflow."""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from incusdash.models import Notification

logger = logging.getLogger("incusdash.notifications")


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None: ...


class NotificationCenter:
    """Ordered notification log with listener fan-out.

    Listeners are called synchronously in registration order; a display
    hooks in here to show toasts.
    """

    def __init__(self) -> None:
        self._items: list[Notification] = []
        self._listeners: list[Callable[[Notification], None]] = []

    def subscribe(self, listener: Callable[[Notification], None]) -> None:
        self._listeners.append(listener)

    def notify(self, notification: Notification) -> None:
        self._items.append(notification)
        logger.debug(
            "notification level=%s operation=%s project_id=%s",
            notification.level, notification.operation, notification.project_id,
        )
        for listener in self._listeners:
            listener(notification)

    def success(self, message: str, **kwargs) -> Notification:
        notif = Notification(level="success", message=message, **kwargs)
        self.notify(notif)
        return notif

    def error(self, message: str, **kwargs) -> Notification:
        notif = Notification(level="error", message=message, **kwargs)
        self.notify(notif)
        return notif

    def all(self, project_id: int | None = None) -> list[Notification]:
        """Notifications in emission order, optionally for one project."""
        return [
            n for n in self._items
            if project_id is None or n.project_id == project_id
        ]

    def last(self) -> Notification | None:
        return self._items[-1] if self._items else None

    def clear(self) -> None:
        self._items.clear()


class Navigator:
    """Records navigation requests; ``refresh`` re-runs an optional callback."""

    def __init__(self, on_refresh: Callable[[], None] | None = None) -> None:
        self.history: list[str] = []
        self.refresh_count = 0
        self._on_refresh = on_refresh

    @property
    def current(self) -> str | None:
        return self.history[-1] if self.history else None

    def push(self, path: str) -> None:
        logger.info("Navigating to %s", path)
        self.history.append(path)

    def refresh(self) -> None:
        self.refresh_count += 1
        if self._on_refresh is not None:
            self._on_refresh()
