"""Training plan and training log models for the FitCoach platform."""
import uuid
from datetime import date

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.config.database import Base
from src.core.models import TimestampMixin, UUIDMixin

ALLOWED_FREQUENCIES = (3, 4, 5)
MAX_EXERCISES_PER_SESSION = 10
MIN_PLAN_DAYS = 7
MAX_PLAN_DAYS = 365


def day_of_week_for(day: date) -> int:
    """Day-of-week with 0 = Sunday ... 6 = Saturday."""
    return day.isoweekday() % 7


class TrainingPlan(Base, UUIDMixin, TimestampMixin):
    """A trainer-authored weekly plan for one client, active for a date range."""

    __tablename__ = "training_plans"
    __table_args__ = (
        Index("ix_training_plans_client_active", "client_id", "is_active"),
    )

    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    trainer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    frequency: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    client: Mapped["User"] = relationship("User", foreign_keys=[client_id], lazy="selectin")
    trainer: Mapped["User"] = relationship("User", foreign_keys=[trainer_id], lazy="selectin")
    sessions: Mapped[list["PlanSession"]] = relationship(
        "PlanSession",
        back_populates="plan",
        order_by="PlanSession.day_of_week",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def session_for_day(self, day_of_week: int) -> "PlanSession | None":
        """Return the session scheduled on a day-of-week, if any."""
        for session in self.sessions:
            if session.day_of_week == day_of_week:
                return session
        return None

    def covers(self, day: date) -> bool:
        """Whether the date falls inside the plan's [start_date, end_date] window."""
        return self.start_date <= day <= self.end_date

    def __repr__(self) -> str:
        return f"<TrainingPlan {self.name} client={self.client_id} active={self.is_active}>"


class PlanSession(Base, UUIDMixin):
    """The exercises scheduled for one weekday within a plan."""

    __tablename__ = "plan_sessions"
    __table_args__ = (
        UniqueConstraint("plan_id", "day_of_week", name="uq_plan_session_day"),
    )

    plan_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("training_plans.id", ondelete="CASCADE"),
        nullable=False,
    )
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)  # 0 = Sunday

    plan: Mapped["TrainingPlan"] = relationship("TrainingPlan", back_populates="sessions")
    exercises: Mapped[list["PlanExercise"]] = relationship(
        "PlanExercise",
        back_populates="session",
        order_by="PlanExercise.order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class PlanExercise(Base, UUIDMixin):
    """A single exercise prescription inside a day session."""

    __tablename__ = "plan_exercises"

    session_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("plan_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sets: Mapped[int] = mapped_column(Integer, nullable=False)
    reps: Mapped[str] = mapped_column(String(50), nullable=False)  # "10", "8-12"
    instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False)

    session: Mapped["PlanSession"] = relationship("PlanSession", back_populates="exercises")


class TrainingLog(Base, UUIDMixin, TimestampMixin):
    """A client's record of completing or skipping a scheduled session."""

    __tablename__ = "training_logs"
    __table_args__ = (
        UniqueConstraint(
            "client_id", "plan_id", "day_of_week", "log_date",
            name="uq_training_log_session_day",
        ),
        Index("ix_training_logs_client_date", "client_id", "log_date"),
        Index("ix_training_logs_trainer_date", "trainer_id", "log_date"),
    )

    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    trainer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    plan_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("training_plans.id", ondelete="CASCADE"),
        nullable=False,
    )
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    log_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    proof_image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)

    plan: Mapped["TrainingPlan"] = relationship("TrainingPlan", lazy="selectin")

    def __repr__(self) -> str:
        status = "completed" if self.is_completed else "missed"
        return f"<TrainingLog client={self.client_id} {self.log_date} {status}>"
