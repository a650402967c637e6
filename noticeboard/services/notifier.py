"""
Durable notification fan-out.

Runs after the triggering change has been committed. Every write uses its
own session, so a failure is logged and dropped without touching the
request that caused it or the other notifications of the same event.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from noticeboard.models import (
    ALL_DEPARTMENTS,
    Comment,
    Notice,
    Notification,
    NotificationType,
    User,
    UserRole,
)

logger = logging.getLogger(__name__)


def new_notice_message(notice: Notice) -> str:
    return f"New {notice.category.value} notice: {notice.title}"


class NotificationRecorder:
    """Decides who hears about an event and stores one record per recipient."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def on_notice_published(self, notice: Notice) -> int:
        """
        Notify the students a published notice is addressed to.

        Active students of the notice's department, or every active student
        for "All Departments". Faculty and admins are never notified.

        Returns:
            Number of notifications stored (0 on failure)
        """
        if not notice.is_published:
            return 0

        try:
            async with self._session_factory() as db:
                query = select(User.id).where(
                    User.role == UserRole.STUDENT,
                    User.is_active.is_(True),
                )
                if notice.department != ALL_DEPARTMENTS:
                    query = query.where(User.department == notice.department)

                recipient_ids = (await db.execute(query)).scalars().all()
                if not recipient_ids:
                    return 0

                message = new_notice_message(notice)
                db.add_all([
                    Notification(
                        user_id=user_id,
                        type=NotificationType.NEW_NOTICE,
                        message=message,
                        related_notice_id=notice.id,
                    )
                    for user_id in recipient_ids
                ])
                await db.commit()
        except Exception as e:
            logger.error(f"Failed to record new-notice notifications for notice {notice.id}: {e}")
            return 0

        logger.info(f"Notice {notice.id}: notified {len(recipient_ids)} students")
        return len(recipient_ids)

    async def on_comment_created(
        self,
        comment: Comment,
        notice: Notice,
        commenter: User,
        parent_author_id: Optional[int] = None,
    ) -> int:
        """
        Notify the notice author and, for a reply, the replied-to author.

        The two are independent: when they are the same person that person
        gets two notifications. Nobody is notified about their own comment.

        Returns:
            Number of notifications stored
        """
        stored = 0

        if notice.author_id != commenter.id:
            if await self._store(
                user_id=notice.author_id,
                message=f"{commenter.name} commented on your notice: {notice.title}",
                notice_id=notice.id,
                comment_id=comment.id,
            ):
                stored += 1

        if parent_author_id is not None and parent_author_id != commenter.id:
            if await self._store(
                user_id=parent_author_id,
                message=f"{commenter.name} replied to your comment on: {notice.title}",
                notice_id=notice.id,
                comment_id=comment.id,
            ):
                stored += 1

        return stored

    async def _store(
        self,
        *,
        user_id: int,
        message: str,
        notice_id: int,
        comment_id: int,
        notification_type: NotificationType = NotificationType.COMMENT,
    ) -> bool:
        try:
            async with self._session_factory() as db:
                db.add(Notification(
                    user_id=user_id,
                    type=notification_type,
                    message=message,
                    related_notice_id=notice_id,
                    related_comment_id=comment_id,
                ))
                await db.commit()
        except Exception as e:
            logger.error(f"Failed to record {notification_type.value} notification for user {user_id}: {e}")
            return False
        return True
