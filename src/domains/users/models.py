"""User models for the FitCoach platform."""
import enum
import uuid

from sqlalchemy import Boolean, Enum, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.config.database import Base
from src.core.models import TimestampMixin, UUIDMixin


class UserRole(str, enum.Enum):
    """Platform roles."""

    CLIENT = "client"
    TRAINER = "trainer"
    ADMIN = "admin"


class User(Base, UUIDMixin, TimestampMixin):
    """User model representing a platform user."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role_enum", values_callable=lambda x: [e.value for e in x]),
        default=UserRole.CLIENT,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # A client's personal trainer (first trainer to create a plan for them)
    trainer_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    trainer: Mapped["User | None"] = relationship(
        "User",
        remote_side="User.id",
        foreign_keys=[trainer_id],
    )

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role.value})>"
