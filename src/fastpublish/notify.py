"""User-facing notifications.

The pipelines report progress through a :class:`Notifier` and never wait on
it. :class:`ConsoleNotifier` prints with rich; :class:`RecordingNotifier`
keeps notifications in memory for callers that render them elsewhere.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from rich.console import Console
from rich.markup import escape


class NotificationLevel(Enum):
    """Severity of a notification."""

    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Notification:
    """A single message for the user.

    Attributes:
        level: Severity.
        title: One-line summary.
        detail: Optional multi-line diagnostic text.
    """

    level: NotificationLevel
    title: str
    detail: str | None = None


class Notifier(Protocol):
    """Receives notifications from the pipelines."""

    def notify(self, notification: Notification) -> None: ...


_STYLES = {
    NotificationLevel.INFO: "blue",
    NotificationLevel.SUCCESS: "green",
    NotificationLevel.ERROR: "red",
}


class ConsoleNotifier:
    """Print notifications to the terminal.

    Errors go to ``error_console`` (stderr by default).
    """

    def __init__(self, console: Console | None = None, error_console: Console | None = None):
        self.console = console or Console()
        self.error_console = error_console or Console(stderr=True)

    def notify(self, notification: Notification) -> None:
        target = (
            self.error_console if notification.level == NotificationLevel.ERROR else self.console
        )
        style = _STYLES[notification.level]
        target.print(f"[{style}]{escape(notification.title)}[/{style}]")
        if notification.detail:
            target.print(escape(notification.detail.rstrip()), style="dim", highlight=False)


@dataclass
class RecordingNotifier:
    """Collect notifications in a list."""

    notifications: list[Notification] = field(default_factory=list)

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def titles(self, level: NotificationLevel | None = None) -> list[str]:
        """Titles of recorded notifications, optionally filtered by level."""
        return [n.title for n in self.notifications if level is None or n.level == level]
