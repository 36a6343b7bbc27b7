"""Notification models for user notifications."""
import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.config.database import Base
from src.core.models import TimestampMixin, UUIDMixin


class NotificationType(str, enum.Enum):
    """Type of notification."""

    # Trainer alerts from the compliance sweep
    COMPLIANCE_SUMMARY = "compliance_summary"
    WORKOUT_UNMARKED = "workout_unmarked"

    # Trainer alert when a client logs a skipped session
    MISSED_WORKOUT = "missed_workout"

    # Client alert when a trainer publishes a plan
    PLAN_ASSIGNED = "plan_assigned"


class Notification(Base, UUIDMixin, TimestampMixin):
    """Notification for a user."""

    __tablename__ = "notifications"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    notification_type: Mapped[NotificationType] = mapped_column(
        Enum(NotificationType, name="notification_type_enum", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    link: Mapped[str | None] = mapped_column(String(500), nullable=True)

    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    sender: Mapped["User | None"] = relationship("User", foreign_keys=[sender_id], lazy="selectin")

    def __repr__(self) -> str:
        return f"<Notification {self.notification_type.value} to={self.user_id}>"
