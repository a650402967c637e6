"""
Database models for the notice board.

All models are exported here for convenient imports:
    from noticeboard.models import Notice, Comment, Notification, etc.
"""

from noticeboard.models.base import Base, BaseModel, TimestampMixin
from noticeboard.models.comment import Comment
from noticeboard.models.notice import (
    ALL_DEPARTMENTS,
    Notice,
    NoticeAcknowledgment,
    NoticeCategory,
    NoticePriority,
    NoticeStatus,
    NoticeView,
)
from noticeboard.models.notification import Notification, NotificationType
from noticeboard.models.user import User, UserRole

__all__ = [
    # Base
    "Base",
    "BaseModel",
    "TimestampMixin",
    # User
    "User",
    "UserRole",
    # Notice
    "ALL_DEPARTMENTS",
    "Notice",
    "NoticeView",
    "NoticeAcknowledgment",
    "NoticeCategory",
    "NoticePriority",
    "NoticeStatus",
    # Comment
    "Comment",
    # Notification
    "Notification",
    "NotificationType",
]
