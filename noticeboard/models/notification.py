"""
Notification model: durable per-recipient record of something that happened.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from noticeboard.models.base import BaseModel

if TYPE_CHECKING:
    from noticeboard.models.notice import Notice


class NotificationType(str, Enum):
    """Kinds of events a user can be notified about."""
    NEW_NOTICE = "new_notice"
    COMMENT = "comment"
    ACKNOWLEDGMENT = "acknowledgment"
    MENTION = "mention"
    SYSTEM = "system"


class Notification(BaseModel):
    """Notification addressed to exactly one user."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_read_created", "user_id", "is_read", "created_at"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[NotificationType] = mapped_column(
        SQLAlchemyEnum(
            NotificationType,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    related_notice_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("notices.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    related_comment_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("comments.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    read_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    related_notice: Mapped[Optional["Notice"]] = relationship(
        "Notice", foreign_keys=[related_notice_id], lazy="joined"
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, user_id={self.user_id}, type={self.type})>"
