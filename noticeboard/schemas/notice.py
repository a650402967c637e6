"""Pydantic schemas for notices."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from noticeboard.models import NoticeCategory, NoticePriority, NoticeStatus
from noticeboard.schemas.comment import CommentResponse
from noticeboard.schemas.common import ApiResponse, Pagination
from noticeboard.schemas.user import UserSummary


class Attachment(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: Optional[str] = Field(None, max_length=100)
    url: str = Field(..., min_length=1)
    size: Optional[int] = Field(None, ge=0)


class NoticeCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    category: NoticeCategory
    department: str = Field(..., min_length=1, max_length=100)
    target_year: Optional[str] = Field(None, max_length=20)
    priority: NoticePriority = NoticePriority.MEDIUM
    status: NoticeStatus = NoticeStatus.PUBLISHED
    scheduled_date: Optional[datetime] = None
    attachments: list[Attachment] = Field(default_factory=list)


class NoticeUpdate(BaseModel):
    """Partial update. Omitted fields keep their stored value."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[NoticeCategory] = None
    department: Optional[str] = Field(None, min_length=1, max_length=100)
    target_year: Optional[str] = Field(None, max_length=20)
    priority: Optional[NoticePriority] = None
    status: Optional[NoticeStatus] = None
    scheduled_date: Optional[datetime] = None
    attachments: Optional[list[Attachment]] = None
    is_pinned: Optional[bool] = None
    is_archived: Optional[bool] = None


class NoticeResponse(BaseModel):
    id: int
    title: str
    content: str
    category: NoticeCategory
    department: str
    target_year: Optional[str] = None
    priority: NoticePriority
    status: NoticeStatus
    scheduled_date: Optional[datetime] = None
    attachments: list[Attachment] = []
    is_pinned: bool
    is_archived: bool
    author: UserSummary
    comment_count: int = 0
    view_count: int = 0
    acknowledged_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class NoticeDetailResponse(NoticeResponse):
    """Single notice with its comment thread."""
    comments: list[CommentResponse] = []


class NoticeListResponse(ApiResponse[list[NoticeResponse]]):
    pagination: Pagination


class AcknowledgeResponse(ApiResponse[None]):
    acknowledged_count: int
