"""Business logic services."""

from noticeboard.services.broadcaster import Broadcaster
from noticeboard.services.notifier import NotificationRecorder
from noticeboard.services.visibility import visible_notices_predicate

__all__ = [
    "Broadcaster",
    "NotificationRecorder",
    "visible_notices_predicate",
]
