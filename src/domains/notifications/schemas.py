"""Notification schemas for API validation."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .models import NotificationType


class NotificationAlert(BaseModel):
    """Structured alert handed to the dispatcher (internal use)."""

    notification_type: NotificationType
    title: str = Field(..., max_length=255)
    body: str
    link: str | None = None
    sender_id: UUID | None = None


class NotificationResponse(BaseModel):
    """Schema for notification response."""

    id: UUID
    notification_type: NotificationType
    title: str
    body: str
    link: str | None
    sender_id: UUID | None
    sender_name: str | None = None
    is_read: bool
    read_at: datetime | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationListResponse(BaseModel):
    """Schema for notification list response."""

    notifications: list[NotificationResponse]
    total: int
    unread_count: int


class UnreadCountResponse(BaseModel):
    """Schema for unread count response."""

    unread_count: int


class MarkAllReadResponse(BaseModel):
    """Schema for mark-all-read response."""

    updated: int
