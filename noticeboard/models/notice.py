"""Notice model with per-user view and acknowledgment tracking."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from noticeboard.models.base import Base, BaseModel, utcnow

if TYPE_CHECKING:
    from noticeboard.models.user import User

# Department value that makes a notice visible to every department
ALL_DEPARTMENTS = "All Departments"


class NoticeCategory(str, Enum):
    ACADEMIC = "academic"
    EVENTS = "events"
    EXAMS = "exams"
    CIRCULARS = "circulars"


class NoticePriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class NoticeStatus(str, Enum):
    PUBLISHED = "published"
    SCHEDULED = "scheduled"
    DRAFT = "draft"


class Notice(BaseModel):
    """Announcement published by faculty or admin to a scoped audience."""

    __tablename__ = "notices"
    __table_args__ = (
        Index("ix_notices_category_department_status", "category", "department", "status"),
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[NoticeCategory] = mapped_column(
        SQLAlchemyEnum(NoticeCategory, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    department: Mapped[str] = mapped_column(String(100), nullable=False)
    target_year: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    priority: Mapped[NoticePriority] = mapped_column(
        SQLAlchemyEnum(NoticePriority, values_callable=lambda x: [e.value for e in x]),
        default=NoticePriority.MEDIUM,
        nullable=False,
    )
    status: Mapped[NoticeStatus] = mapped_column(
        SQLAlchemyEnum(NoticeStatus, values_callable=lambda x: [e.value for e in x]),
        default=NoticeStatus.PUBLISHED,
        nullable=False,
    )
    scheduled_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    # File metadata only: [{"name", "type", "url", "size"}]
    attachments: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    is_pinned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    author: Mapped["User"] = relationship("User", foreign_keys=[author_id], lazy="joined")

    @property
    def is_published(self) -> bool:
        return self.status == NoticeStatus.PUBLISHED

    def __repr__(self) -> str:
        return f"<Notice(id={self.id}, title='{self.title}', status={self.status})>"


class NoticeView(Base):
    """First time a user opened a notice. One row per (notice, user)."""

    __tablename__ = "notice_views"
    __table_args__ = (
        UniqueConstraint("notice_id", "user_id", name="uq_notice_view_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    notice_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("notices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )


class NoticeAcknowledgment(Base):
    """Explicit "I have read this" from a user. One row per (notice, user)."""

    __tablename__ = "notice_acknowledgments"
    __table_args__ = (
        UniqueConstraint("notice_id", "user_id", name="uq_notice_ack_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    notice_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("notices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    acknowledged_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
