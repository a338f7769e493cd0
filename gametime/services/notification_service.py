"""Notification sinks for user-facing feedback."""
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, List, Protocol

from ..utils import get_logger

log = get_logger("services.notifications")


class Severity(Enum):
    """Notification severities understood by the front end."""
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"
    INFO = "info"


class NotificationSink(Protocol):
    """Fire-and-forget feedback channel; the core never reads from it."""

    def notify(self, message: str, severity: Severity) -> None:
        ...


@dataclass
class Notification:
    message: str
    severity: Severity

    def to_json(self) -> dict:
        return {"message": self.message, "severity": self.severity.value}


class LoggingNotifier:
    """Sink that writes notifications to the application log."""

    _LEVELS = {
        Severity.SUCCESS: 20,
        Severity.INFO: 20,
        Severity.WARNING: 30,
        Severity.DANGER: 30,
    }

    def notify(self, message: str, severity: Severity) -> None:
        log.log(self._LEVELS.get(severity, 20), f"[{severity.value}] {message}")


class QueuedNotifier:
    """
    Sink that buffers notifications until a caller drains them.

    The web API drains the queue into each response so the browser can show
    toast messages.
    """

    def __init__(self, max_pending: int = 50):
        self._pending: Deque[Notification] = deque(maxlen=max_pending)

    def notify(self, message: str, severity: Severity) -> None:
        self._pending.append(Notification(message, severity))

    def drain(self) -> List[Notification]:
        """Return and clear all pending notifications."""
        items = list(self._pending)
        self._pending.clear()
        return items

    def __len__(self) -> int:
        return len(self._pending)
