"""Pydantic schemas for request/response validation."""

from noticeboard.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from noticeboard.schemas.common import ApiResponse, Pagination
from noticeboard.schemas.notice import (
    AcknowledgeResponse,
    Attachment,
    NoticeCreate,
    NoticeDetailResponse,
    NoticeListResponse,
    NoticeResponse,
    NoticeUpdate,
)
from noticeboard.schemas.notification import (
    NotificationListResponse,
    NotificationResponse,
    RelatedNotice,
)
from noticeboard.schemas.user import UserSummary

__all__ = [
    # Common
    "ApiResponse",
    "Pagination",
    # User
    "UserSummary",
    # Notice
    "Attachment",
    "NoticeCreate",
    "NoticeUpdate",
    "NoticeResponse",
    "NoticeDetailResponse",
    "NoticeListResponse",
    "AcknowledgeResponse",
    # Comment
    "CommentCreate",
    "CommentUpdate",
    "CommentResponse",
    # Notification
    "NotificationResponse",
    "NotificationListResponse",
    "RelatedNotice",
]
