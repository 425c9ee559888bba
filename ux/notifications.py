# ux/notifications.py
"""
Blocking user notifications.

Every failure the user must see goes through a Notifier: backend errors name
the failed operation and carry the backend's own text, validation problems
carry the form's message. A UI shell registers a sink to display them.
"""
from dataclasses import dataclass
from typing import Callable, List, Optional
import logging

logger = logging.getLogger('teamreg.ux')

LEVEL_ERROR = "error"
LEVEL_VALIDATION = "validation"


@dataclass(frozen=True)
class Notification:
    level: str
    message: str
    operation: str = ""

    @property
    def text(self) -> str:
        if self.level == LEVEL_ERROR and self.operation:
            return f"Error {self.operation}: {self.message}"
        return self.message

    def __str__(self):
        return self.text


class Notifier:
    def __init__(self, sink: Optional[Callable[[Notification], None]] = None):
        self.history: List[Notification] = []
        self._sink = sink

    def error(self, operation: str, message: str) -> Notification:
        notification = Notification(level=LEVEL_ERROR, message=message, operation=operation)
        logger.warning(notification.text)
        return self._publish(notification)

    def validation(self, message: str) -> Notification:
        return self._publish(Notification(level=LEVEL_VALIDATION, message=message))

    @property
    def last(self) -> Optional[Notification]:
        return self.history[-1] if self.history else None

    def clear(self):
        self.history.clear()

    def _publish(self, notification: Notification) -> Notification:
        self.history.append(notification)
        if self._sink is not None:
            self._sink(notification)
        return notification
