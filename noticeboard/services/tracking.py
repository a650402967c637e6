"""
At-most-once view and acknowledgment records per (notice, user).

The first call wins and fixes the timestamp; later calls are no-ops. The
existence check is not transactional, so two concurrent first calls by the
same user can both try to insert. The unique constraint rejects the loser,
which is then treated as already recorded.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from noticeboard.models import Notice, NoticeAcknowledgment, NoticeView

logger = logging.getLogger(__name__)


async def _insert_once(db: AsyncSession, model, notice: Notice, user_id: int) -> bool:
    notice_id = notice.id
    existing = await db.execute(
        select(model.id).where(
            model.notice_id == notice_id,
            model.user_id == user_id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        return False

    db.add(model(notice_id=notice_id, user_id=user_id))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        # Rollback expires everything loaded in the session
        await db.refresh(notice)
        logger.debug(
            f"{model.__tablename__}: concurrent insert for notice {notice_id}, user {user_id}"
        )
        return False
    return True


async def record_view(db: AsyncSession, notice: Notice, user_id: int) -> bool:
    """
    Record that ``user_id`` opened ``notice``.

    Returns:
        True if this was the user's first view
    """
    return await _insert_once(db, NoticeView, notice, user_id)


async def record_acknowledgment(db: AsyncSession, notice: Notice, user_id: int) -> int:
    """
    Record that ``user_id`` acknowledged ``notice``.

    Returns:
        Number of distinct users who have acknowledged the notice
    """
    notice_id = notice.id
    if await _insert_once(db, NoticeAcknowledgment, notice, user_id):
        logger.info(f"User {user_id} acknowledged notice {notice_id}")
    return await count_acknowledgments(db, notice_id)


async def count_views(db: AsyncSession, notice_id: int) -> int:
    return await db.scalar(
        select(func.count()).select_from(NoticeView).where(NoticeView.notice_id == notice_id)
    ) or 0


async def count_acknowledgments(db: AsyncSession, notice_id: int) -> int:
    return await db.scalar(
        select(func.count())
        .select_from(NoticeAcknowledgment)
        .where(NoticeAcknowledgment.notice_id == notice_id)
    ) or 0
