"""
User-facing notifications raised by the editor instead of exceptions.
"""

import enum
import logging
import threading
from dataclasses import dataclass
from typing import List

from pydantic import ValidationError

from infinity_timeline.core.exceptions import (
    AuthorizationError,
    InvalidInputError,
    TimelineError,
)

logger = logging.getLogger(__name__)


class Level(str, enum.Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    level: Level
    message: str
    # Blocking notifications need an explicit acknowledgement (e.g. permission denied)
    blocking: bool = False


class Notifier:
    """Thread-safe sink for notifications, drained by whatever renders them."""

    def __init__(self):
        self._lock = threading.Lock()
        self._pending: List[Notification] = []

    def notify(self, level: Level, message: str, blocking: bool = False) -> Notification:
        notification = Notification(level, message, blocking)
        log_level = logging.WARNING if level in (Level.WARNING, Level.ERROR) else logging.INFO
        logger.log(log_level, f"[{level.value}] {message}")
        with self._lock:
            self._pending.append(notification)
        return notification

    def success(self, message: str) -> Notification:
        return self.notify(Level.SUCCESS, message)

    def warning(self, message: str) -> Notification:
        return self.notify(Level.WARNING, message)

    def error(self, message: str, blocking: bool = False) -> Notification:
        return self.notify(Level.ERROR, message, blocking)

    def from_error(self, error: Exception, action: str) -> Notification:
        """Turn a failed operation into a notification."""
        if isinstance(error, AuthorizationError):
            return self.error(f"Permission denied: {error.message}", blocking=True)
        if isinstance(error, ValidationError):
            first = error.errors()[0]
            return self.warning(f"Could not {action}: {first['msg']}")
        if isinstance(error, InvalidInputError):
            return self.warning(f"Could not {action}: {error.message}")
        if isinstance(error, TimelineError):
            return self.error(f"Could not {action}: {error.message}")
        return self.error(f"Could not {action}")

    @property
    def pending(self) -> List[Notification]:
        with self._lock:
            return list(self._pending)

    def drain(self) -> List[Notification]:
        with self._lock:
            drained, self._pending = self._pending, []
        return drained
