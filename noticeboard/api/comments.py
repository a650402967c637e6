"""Comments API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from noticeboard.api.deps import get_broadcaster, get_recorder
from noticeboard.auth.dependencies import get_current_user, get_current_user_optional
from noticeboard.db import get_db
from noticeboard.models import User
from noticeboard.schemas import ApiResponse, CommentCreate, CommentResponse, CommentUpdate
from noticeboard.services import comments as comment_service
from noticeboard.services.broadcaster import NEW_COMMENT, Broadcaster
from noticeboard.services.notices import get_notice, to_response
from noticeboard.services.notifier import NotificationRecorder

router = APIRouter(prefix="/comments", tags=["Comments"])


@router.get("/notice/{notice_id}", response_model=ApiResponse[list[CommentResponse]])
async def list_comments(
    notice_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    """Threaded comments of a notice: newest top-level first, replies oldest first."""
    await get_notice(db, notice_id, current_user, check_visibility=True)
    return ApiResponse(data=await comment_service.list_thread(db, notice_id))


@router.post("", response_model=ApiResponse[CommentResponse], status_code=status.HTTP_201_CREATED)
async def create_comment(
    data: CommentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    recorder: NotificationRecorder = Depends(get_recorder),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    """
    Comment on a notice, or reply to a comment.

    The notice author is told about every comment from someone else, and
    the author of the replied-to comment about every reply from someone
    else. When both are the same person they hear about it twice.
    """
    notice = await get_notice(db, data.notice_id, current_user, check_visibility=True)
    comment, replied_to = await comment_service.create_comment(
        db, notice, current_user, data.content, data.parent_comment_id
    )
    parent_author_id = replied_to.author_id if replied_to else None

    await recorder.on_comment_created(comment, notice, current_user, parent_author_id)

    response = CommentResponse.model_validate(comment)
    comment_payload = response.model_dump(mode="json")
    notice_payload = to_response(notice).model_dump(mode="json")
    target_user_id = notice.author_id if notice.author_id != current_user.id else None
    broadcaster.comment_created(comment_payload, notice_payload, target_user_id)

    if parent_author_id is not None and parent_author_id != current_user.id:
        broadcaster.notify_user(parent_author_id, NEW_COMMENT, {
            "comment": comment_payload,
            "notice": notice_payload,
            "message": f"{current_user.name} replied to your comment",
        })

    return ApiResponse(message="Comment added successfully", data=response)


@router.put("/{comment_id}", response_model=ApiResponse[CommentResponse])
async def update_comment(
    comment_id: int,
    data: CommentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    """Edit a comment (author or admin)."""
    comment = await comment_service.get_comment(db, comment_id)
    comment_service.ensure_can_modify(current_user, comment, "edit")

    comment = await comment_service.update_comment(db, comment, data.content)
    response = CommentResponse.model_validate(comment)
    broadcaster.comment_edited(response.model_dump(mode="json"))

    return ApiResponse(message="Comment updated successfully", data=response)


@router.delete("/{comment_id}", response_model=ApiResponse[None])
async def delete_comment(
    comment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    """Delete a comment (author or admin). A top-level comment takes its replies with it."""
    comment = await comment_service.get_comment(db, comment_id)
    comment_service.ensure_can_modify(current_user, comment, "delete")

    await comment_service.delete_comment(db, comment)
    broadcaster.comment_deleted(comment_id)

    return ApiResponse(message="Comment deleted successfully")
