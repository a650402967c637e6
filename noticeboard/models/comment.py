"""
Comment model.

Threading is one level deep: a reply points at a top-level comment on the
same notice through ``parent_id``. Replies are looked up by ``parent_id``;
the parent keeps no list of its own.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from noticeboard.models.base import BaseModel

if TYPE_CHECKING:
    from noticeboard.models.user import User


class Comment(BaseModel):
    """Comment or reply on a notice."""

    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_notice_created", "notice_id", "created_at"),
    )

    notice_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("notices.id", ondelete="CASCADE"), nullable=False
    )
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    parent_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    is_edited: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    edited_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    author: Mapped["User"] = relationship("User", foreign_keys=[author_id], lazy="joined")

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, notice_id={self.notice_id}, parent_id={self.parent_id})>"
