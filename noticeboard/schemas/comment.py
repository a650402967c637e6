"""Pydantic schemas for comments."""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from noticeboard.schemas.user import UserSummary


class CommentCreate(BaseModel):
    notice_id: int = Field(..., validation_alias=AliasChoices("notice_id", "noticeId"))
    content: str = Field(..., min_length=1, max_length=5000)
    parent_comment_id: Optional[int] = Field(
        None, validation_alias=AliasChoices("parent_comment_id", "parentCommentId")
    )

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("content is required")
        return v


class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("content is required")
        return v


class CommentResponse(BaseModel):
    id: int
    notice_id: int
    author: UserSummary
    content: str
    parent_id: Optional[int] = None
    is_reply: bool = False
    is_edited: bool = False
    edited_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    replies: list["CommentResponse"] = []

    model_config = {"from_attributes": True}
