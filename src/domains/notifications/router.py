"""Notifications router for user notifications."""
from datetime import datetime, timezone
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import get_db
from src.domains.auth.dependencies import CurrentUser

from .models import Notification, NotificationType
from .realtime import stream_notifications
from .schemas import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)

router = APIRouter()


def _notification_to_response(notification: Notification) -> NotificationResponse:
    """Convert notification model to response schema."""
    return NotificationResponse(
        id=notification.id,
        notification_type=notification.notification_type,
        title=notification.title,
        body=notification.body,
        link=notification.link,
        sender_id=notification.sender_id,
        sender_name=notification.sender.name if notification.sender else None,
        is_read=notification.is_read,
        read_at=notification.read_at,
        created_at=notification.created_at,
    )


async def _count_unread(db: AsyncSession, user_id: UUID) -> int:
    result = await db.execute(
        select(func.count(Notification.id)).where(
            and_(
                Notification.user_id == user_id,
                Notification.is_read == False,  # noqa: E712
            )
        )
    )
    return result.scalar() or 0


async def _get_own_notification(
    db: AsyncSession,
    notification_id: UUID,
    user_id: UUID,
) -> Notification:
    notification = await db.get(Notification, notification_id)
    if not notification or notification.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found",
        )
    return notification


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    unread_only: Annotated[bool, Query()] = False,
    notification_type: Annotated[NotificationType | None, Query()] = None,
) -> NotificationListResponse:
    """List notifications for current user, newest first."""
    base_filter = [Notification.user_id == current_user.id]

    if unread_only:
        base_filter.append(Notification.is_read == False)  # noqa: E712

    if notification_type:
        base_filter.append(Notification.notification_type == notification_type)

    result = await db.execute(select(func.count(Notification.id)).where(and_(*base_filter)))
    total = result.scalar() or 0

    result = await db.execute(
        select(Notification)
        .where(and_(*base_filter))
        .order_by(Notification.created_at.desc())
        .limit(limit)
    )
    notifications = list(result.scalars().all())

    return NotificationListResponse(
        notifications=[_notification_to_response(n) for n in notifications],
        total=total,
        unread_count=await _count_unread(db, current_user.id),
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UnreadCountResponse:
    """Get count of unread notifications."""
    return UnreadCountResponse(unread_count=await _count_unread(db, current_user.id))


@router.get("/stream")
async def stream(current_user: CurrentUser) -> StreamingResponse:
    """Live notifications via Server-Sent Events."""
    return StreamingResponse(
        stream_notifications(current_user.id),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MarkAllReadResponse:
    """Mark every unread notification of the current user as read."""
    result = await db.execute(
        update(Notification)
        .where(
            and_(
                Notification.user_id == current_user.id,
                Notification.is_read == False,  # noqa: E712
            )
        )
        .values(is_read=True, read_at=datetime.now(timezone.utc))
    )
    await db.commit()
    return MarkAllReadResponse(updated=result.rowcount or 0)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: UUID,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> NotificationResponse:
    """Mark a notification as read."""
    notification = await _get_own_notification(db, notification_id, current_user.id)

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = datetime.now(timezone.utc)
        await db.commit()

    return _notification_to_response(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: UUID,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Delete a notification."""
    notification = await _get_own_notification(db, notification_id, current_user.id)
    await db.execute(delete(Notification).where(Notification.id == notification.id))
    await db.commit()
