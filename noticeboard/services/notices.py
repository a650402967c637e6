"""
Notice persistence: lookup, create, update, cascade delete and the
visibility-filtered listing.
"""

import logging
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from noticeboard.errors import ForbiddenError, NotFoundError
from noticeboard.models import (
    Comment,
    Notice,
    NoticeAcknowledgment,
    NoticeStatus,
    NoticeView,
    Notification,
    User,
    UserRole,
)
from noticeboard.schemas.notice import NoticeCreate, NoticeResponse, NoticeUpdate
from noticeboard.services.comments import comment_counts
from noticeboard.services.visibility import notice_ordering, single_notice_predicate, visible_notices_predicate

logger = logging.getLogger(__name__)


async def get_notice(db: AsyncSession, notice_id: int, viewer: Optional[User] = None, *, check_visibility: bool = False) -> Notice:
    """
    Load a notice with its author.

    With ``check_visibility`` the notice must also be visible to ``viewer``;
    a hidden notice is reported exactly like a missing one.
    """
    result = await db.execute(
        select(Notice)
        .where(Notice.id == notice_id)
        .execution_options(populate_existing=True)
    )
    notice = result.scalar_one_or_none()
    if not notice:
        raise NotFoundError("Notice not found")

    if check_visibility:
        predicate = single_notice_predicate(viewer, notice)
        if predicate is not None:
            visible = await db.scalar(
                select(func.count()).select_from(Notice).where(Notice.id == notice_id, predicate)
            )
            if not visible:
                raise NotFoundError("Notice not found")

    return notice


def ensure_can_modify(actor: User, notice: Notice, action: str = "edit") -> None:
    """Only the notice's author or an admin may change it."""
    if actor.role != UserRole.ADMIN and notice.author_id != actor.id:
        raise ForbiddenError(f"You can only {action} your own notices")


async def create_notice(db: AsyncSession, author: User, data: NoticeCreate) -> Notice:
    notice = Notice(
        title=data.title,
        content=data.content,
        category=data.category,
        department=data.department,
        target_year=data.target_year,
        author_id=author.id,
        priority=data.priority,
        status=data.status,
        scheduled_date=data.scheduled_date,
        attachments=[a.model_dump() for a in data.attachments],
    )
    db.add(notice)
    await db.commit()

    logger.info(f"Notice {notice.id} created by user {author.id} ({data.status.value}, {data.department})")
    return await get_notice(db, notice.id)


async def update_notice(db: AsyncSession, notice: Notice, data: NoticeUpdate) -> tuple[Notice, bool]:
    """
    Apply a partial update.

    Returns:
        (updated notice, True if this update published the notice)
    """
    was_published = notice.status == NoticeStatus.PUBLISHED
    changes = data.model_dump(exclude_unset=True)

    for field, value in changes.items():
        if field == "attachments":
            value = value or []
        elif value is None and field != "target_year" and field != "scheduled_date":
            # Required columns keep their value when sent as null
            continue
        setattr(notice, field, value)

    await db.commit()

    notice = await get_notice(db, notice.id)
    became_published = not was_published and notice.status == NoticeStatus.PUBLISHED
    logger.info(f"Notice {notice.id} updated: {sorted(changes)}")
    return notice, became_published


async def delete_notice(db: AsyncSession, notice: Notice) -> None:
    """Hard delete with its comments, notifications, views and acknowledgments."""
    notice_id = notice.id
    await db.execute(delete(Notification).where(Notification.related_notice_id == notice_id))
    await db.execute(delete(Comment).where(Comment.notice_id == notice_id))
    await db.execute(delete(NoticeView).where(NoticeView.notice_id == notice_id))
    await db.execute(delete(NoticeAcknowledgment).where(NoticeAcknowledgment.notice_id == notice_id))
    await db.delete(notice)
    await db.commit()
    logger.info(f"Notice {notice_id} deleted")


async def list_visible_notices(
    db: AsyncSession,
    viewer: Optional[User],
    *,
    category: Optional[str] = None,
    department: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[Notice], int]:
    """
    One page of notices visible to ``viewer``, pinned first then newest.

    Returns:
        (notices on the page, total matching)
    """
    predicate = visible_notices_predicate(
        viewer,
        category=category,
        department=department,
        status=status,
        search=search,
    )

    total = await db.scalar(
        select(func.count()).select_from(Notice).where(predicate)
    ) or 0

    result = await db.execute(
        select(Notice)
        .where(predicate)
        .order_by(*notice_ordering())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def notice_stats(db: AsyncSession, notice_ids: list[int]) -> dict[int, dict[str, int]]:
    """Comment, view and acknowledgment counts per notice."""
    stats = {
        notice_id: {"comment_count": 0, "view_count": 0, "acknowledged_count": 0}
        for notice_id in notice_ids
    }
    if not notice_ids:
        return stats

    for notice_id, count in (await comment_counts(db, notice_ids)).items():
        stats[notice_id]["comment_count"] = count

    for model, key in ((NoticeView, "view_count"), (NoticeAcknowledgment, "acknowledged_count")):
        result = await db.execute(
            select(model.notice_id, func.count())
            .where(model.notice_id.in_(notice_ids))
            .group_by(model.notice_id)
        )
        for notice_id, count in result.all():
            stats[notice_id][key] = count

    return stats


def to_response(notice: Notice, stats: Optional[dict[str, int]] = None) -> NoticeResponse:
    response = NoticeResponse.model_validate(notice)
    if stats:
        response = response.model_copy(update=stats)
    return response
