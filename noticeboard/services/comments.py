"""
Comment threads on notices.

A comment's ``parent_id`` is the only link between a reply and its parent;
"replies of X" is always a lookup by ``parent_id``. Threads are one level
deep: replying to a reply attaches the new comment to the top-level comment
of that thread.
"""

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from noticeboard.errors import ForbiddenError, NotFoundError, ValidationFailedError
from noticeboard.models import Comment, Notice, User, UserRole
from noticeboard.schemas.comment import CommentResponse

logger = logging.getLogger(__name__)


async def get_comment(db: AsyncSession, comment_id: int) -> Comment:
    """Load a comment with its author, or raise NotFoundError."""
    result = await db.execute(
        select(Comment)
        .where(Comment.id == comment_id)
        .execution_options(populate_existing=True)
    )
    comment = result.scalar_one_or_none()
    if not comment:
        raise NotFoundError("Comment not found")
    return comment


def ensure_can_modify(actor: User, comment: Comment, action: str = "edit") -> None:
    """Only the comment's author or an admin may change it."""
    if actor.role != UserRole.ADMIN and comment.author_id != actor.id:
        raise ForbiddenError(f"You can only {action} your own comments")


async def create_comment(
    db: AsyncSession,
    notice: Notice,
    author: User,
    content: str,
    parent_id: Optional[int] = None,
) -> tuple[Comment, Optional[Comment]]:
    """
    Create a comment, or a reply when ``parent_id`` is given.

    The parent must exist and sit on the same notice; otherwise nothing is
    written.

    Returns:
        (new comment, the comment that was replied to or None)

    Raises:
        NotFoundError: parent comment does not exist
        ValidationFailedError: parent comment belongs to another notice
    """
    replied_to: Optional[Comment] = None
    thread_root_id: Optional[int] = None

    if parent_id is not None:
        replied_to = await db.get(Comment, parent_id)
        if not replied_to:
            raise NotFoundError("Parent comment not found")
        if replied_to.notice_id != notice.id:
            raise ValidationFailedError("Parent comment does not belong to this notice")
        thread_root_id = replied_to.parent_id or replied_to.id

    comment = Comment(
        notice_id=notice.id,
        author_id=author.id,
        content=content,
        parent_id=thread_root_id,
    )
    db.add(comment)
    await db.commit()

    comment = await get_comment(db, comment.id)
    logger.info(
        f"Comment {comment.id} created on notice {notice.id} by user {author.id}"
        + (f" (reply to {parent_id})" if parent_id is not None else "")
    )
    return comment, replied_to


async def update_comment(db: AsyncSession, comment: Comment, content: str) -> Comment:
    """Replace the text and mark the comment as edited."""
    comment.content = content
    comment.is_edited = True
    comment.edited_at = datetime.now(timezone.utc)
    await db.commit()
    return await get_comment(db, comment.id)


async def delete_comment(db: AsyncSession, comment: Comment) -> list[int]:
    """
    Delete a comment.

    A top-level comment takes its replies with it. A reply is simply
    removed, which drops it from its parent's reply list.

    Returns:
        IDs of every deleted comment, the target first
    """
    deleted_ids = [comment.id]

    if comment.parent_id is None:
        reply_ids = (
            await db.execute(select(Comment.id).where(Comment.parent_id == comment.id))
        ).scalars().all()
        if reply_ids:
            await db.execute(delete(Comment).where(Comment.parent_id == comment.id))
            deleted_ids.extend(reply_ids)

    await db.delete(comment)
    await db.commit()

    logger.info(f"Deleted comments {deleted_ids}")
    return deleted_ids


async def get_replies(db: AsyncSession, comment_id: int) -> list[Comment]:
    """Replies of one comment, oldest first."""
    result = await db.execute(
        select(Comment)
        .where(Comment.parent_id == comment_id)
        .order_by(Comment.created_at, Comment.id)
    )
    return list(result.scalars().all())


def build_thread(comments: Iterable[Comment]) -> list[CommentResponse]:
    """
    Group a notice's comments into top-level entries with nested replies.

    Top-level comments come newest first, replies oldest first.
    """
    top_level: list[Comment] = []
    replies_by_parent: dict[int, list[Comment]] = defaultdict(list)

    for comment in comments:
        if comment.parent_id is None:
            top_level.append(comment)
        else:
            replies_by_parent[comment.parent_id].append(comment)

    top_level.sort(key=lambda c: (c.created_at, c.id), reverse=True)

    thread = []
    for comment in top_level:
        item = CommentResponse.model_validate(comment)
        item.replies = [
            CommentResponse.model_validate(reply)
            for reply in sorted(replies_by_parent.get(comment.id, []), key=lambda c: (c.created_at, c.id))
        ]
        thread.append(item)
    return thread


async def list_thread(db: AsyncSession, notice_id: int) -> list[CommentResponse]:
    """All comments on a notice, threaded."""
    result = await db.execute(
        select(Comment).where(Comment.notice_id == notice_id)
    )
    return build_thread(result.scalars().all())


async def comment_counts(db: AsyncSession, notice_ids: list[int]) -> dict[int, int]:
    """Number of comments (replies included) per notice."""
    if not notice_ids:
        return {}
    result = await db.execute(
        select(Comment.notice_id, func.count())
        .where(Comment.notice_id.in_(notice_ids))
        .group_by(Comment.notice_id)
    )
    return {notice_id: count for notice_id, count in result.all()}
