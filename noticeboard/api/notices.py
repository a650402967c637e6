"""Notices API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from noticeboard.api.deps import get_broadcaster, get_recorder
from noticeboard.auth.dependencies import get_current_user, get_current_user_optional, require_author_role
from noticeboard.config import settings
from noticeboard.db import get_db
from noticeboard.models import User
from noticeboard.schemas import (
    AcknowledgeResponse,
    ApiResponse,
    NoticeCreate,
    NoticeDetailResponse,
    NoticeListResponse,
    NoticeResponse,
    NoticeUpdate,
    Pagination,
)
from noticeboard.services import notices as notice_service
from noticeboard.services.broadcaster import Broadcaster
from noticeboard.services.comments import list_thread
from noticeboard.services.notifier import NotificationRecorder
from noticeboard.services.tracking import record_acknowledgment, record_view

router = APIRouter(prefix="/notices", tags=["Notices"])


@router.get("", response_model=NoticeListResponse)
async def list_notices(
    category: Optional[str] = None,
    department: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    """
    Notices visible to the caller, pinned first then newest first.

    Anonymous callers get published, non-archived notices narrowed only by
    the query parameters. Students and faculty are narrowed to their own
    department plus "All Departments" unless ``department`` is given;
    students are further narrowed by year.
    """
    limit = min(limit or settings.default_page_size, settings.max_page_size)

    notices, total = await notice_service.list_visible_notices(
        db,
        current_user,
        category=category,
        department=department,
        status=status,
        search=search,
        page=page,
        limit=limit,
    )
    stats = await notice_service.notice_stats(db, [n.id for n in notices])

    return NoticeListResponse(
        data=[notice_service.to_response(n, stats[n.id]) for n in notices],
        pagination=Pagination.build(total, page, limit),
    )


@router.get("/{notice_id}", response_model=ApiResponse[NoticeDetailResponse])
async def get_notice(
    notice_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    """Single notice with its comment thread. Records a first view for signed-in callers."""
    notice = await notice_service.get_notice(db, notice_id, current_user, check_visibility=True)

    if current_user:
        await record_view(db, notice, current_user.id)

    stats = await notice_service.notice_stats(db, [notice.id])
    detail = NoticeDetailResponse(
        **notice_service.to_response(notice, stats[notice.id]).model_dump(),
        comments=await list_thread(db, notice.id),
    )
    return ApiResponse(data=detail)


@router.post("", response_model=ApiResponse[NoticeResponse], status_code=status.HTTP_201_CREATED)
async def create_notice(
    data: NoticeCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_author_role),
    recorder: NotificationRecorder = Depends(get_recorder),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    """Create a notice (admin and faculty). Published notices fan out immediately."""
    notice = await notice_service.create_notice(db, current_user, data)
    response = notice_service.to_response(notice)

    if notice.is_published:
        await recorder.on_notice_published(notice)
        broadcaster.notice_created(response.model_dump(mode="json"))

    return ApiResponse(message="Notice created successfully", data=response)


@router.put("/{notice_id}", response_model=ApiResponse[NoticeResponse])
async def update_notice(
    notice_id: int,
    data: NoticeUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    recorder: NotificationRecorder = Depends(get_recorder),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    """Update a notice (author or admin)."""
    notice = await notice_service.get_notice(db, notice_id)
    notice_service.ensure_can_modify(current_user, notice, "edit")

    notice, became_published = await notice_service.update_notice(db, notice, data)
    stats = await notice_service.notice_stats(db, [notice.id])
    response = notice_service.to_response(notice, stats[notice.id])

    if became_published:
        await recorder.on_notice_published(notice)
        broadcaster.notice_created(response.model_dump(mode="json"))
    else:
        broadcaster.notice_updated(response.model_dump(mode="json"))

    return ApiResponse(message="Notice updated successfully", data=response)


@router.delete("/{notice_id}", response_model=ApiResponse[None])
async def delete_notice(
    notice_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    """Delete a notice with its comments and notifications (author or admin)."""
    notice = await notice_service.get_notice(db, notice_id)
    notice_service.ensure_can_modify(current_user, notice, "delete")

    await notice_service.delete_notice(db, notice)
    broadcaster.notice_deleted(notice_id)

    return ApiResponse(message="Notice deleted successfully")


@router.post("/{notice_id}/acknowledge", response_model=AcknowledgeResponse)
async def acknowledge_notice(
    notice_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Acknowledge a notice. Repeating it is harmless."""
    notice = await notice_service.get_notice(db, notice_id, current_user, check_visibility=True)
    count = await record_acknowledgment(db, notice, current_user.id)

    return AcknowledgeResponse(message="Notice acknowledged", acknowledged_count=count)
