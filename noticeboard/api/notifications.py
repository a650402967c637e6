"""Notifications API endpoints. Every route is scoped to the caller's own notifications."""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from noticeboard.auth.dependencies import get_current_user
from noticeboard.config import settings
from noticeboard.db import get_db
from noticeboard.errors import NotFoundError
from noticeboard.models import Notification, User
from noticeboard.schemas import ApiResponse, NotificationListResponse, NotificationResponse, Pagination

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


async def _get_own_notification(db: AsyncSession, notification_id: int, user: User) -> Notification:
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user.id,
        )
    )
    notification = result.scalar_one_or_none()
    if not notification:
        raise NotFoundError("Notification not found")
    return notification


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    unread_only: bool = False,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Newest first, with the caller's total unread count."""
    limit = min(limit or settings.default_page_size, settings.max_page_size)

    filters = [Notification.user_id == current_user.id]
    if unread_only:
        filters.append(Notification.is_read.is_(False))

    total = await db.scalar(
        select(func.count()).select_from(Notification).where(*filters)
    ) or 0
    unread_count = await db.scalar(
        select(func.count()).select_from(Notification).where(
            Notification.user_id == current_user.id,
            Notification.is_read.is_(False),
        )
    ) or 0

    result = await db.execute(
        select(Notification)
        .where(*filters)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    notifications = result.scalars().all()

    return NotificationListResponse(
        data=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=unread_count,
        pagination=Pagination.build(total, page, limit),
    )


@router.put("/read-all", response_model=ApiResponse[dict])
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == current_user.id, Notification.is_read.is_(False))
        .values(is_read=True, read_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    logger.info(f"User {current_user.id} marked {result.rowcount} notifications as read")
    return ApiResponse(message="All notifications marked as read", data={"updated": result.rowcount})


@router.put("/{notification_id}/read", response_model=ApiResponse[NotificationResponse])
async def mark_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notification = await _get_own_notification(db, notification_id, current_user)
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = datetime.now(timezone.utc)
        await db.commit()

    return ApiResponse(message="Notification marked as read", data=NotificationResponse.model_validate(notification))


@router.delete("/{notification_id}", response_model=ApiResponse[None])
async def delete_notification(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notification = await _get_own_notification(db, notification_id, current_user)
    await db.execute(delete(Notification).where(Notification.id == notification.id))
    await db.commit()

    return ApiResponse(message="Notification deleted")
