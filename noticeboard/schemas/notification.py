"""Pydantic schemas for notifications."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from noticeboard.models import NoticeCategory, NotificationType
from noticeboard.schemas.common import ApiResponse, Pagination


class RelatedNotice(BaseModel):
    id: int
    title: str
    category: NoticeCategory

    model_config = {"from_attributes": True}


class NotificationResponse(BaseModel):
    id: int
    type: NotificationType
    message: str
    related_notice_id: Optional[int] = None
    related_comment_id: Optional[int] = None
    related_notice: Optional[RelatedNotice] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationListResponse(ApiResponse[list[NotificationResponse]]):
    unread_count: int
    pagination: Pagination
