"""Training log (client check-in) operations."""
import logging
import uuid
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import settings
from src.core.exceptions import (
    ConflictError,
    Forbidden,
    NotFoundError,
    ValidationError,
)
from src.core.timeutils import local_today, month_bounds
from src.domains.notifications.dispatcher import NotificationDispatcher
from src.domains.notifications.models import NotificationType
from src.domains.notifications.schemas import NotificationAlert
from src.domains.users.models import User, UserRole
from src.domains.users.service import UserService
from src.domains.workouts.models import TrainingLog, day_of_week_for
from src.domains.workouts.repository import PlanStore
from src.domains.workouts.schemas import TrainingLogCreate

logger = logging.getLogger(__name__)

DUPLICATE_LOG_MESSAGE = "A training log already exists for this session on this date"


class TrainingLogService:
    """Service for client training logs."""

    def __init__(
        self,
        db: AsyncSession,
        dispatcher: NotificationDispatcher | None = None,
    ):
        self.db = db
        self.store = PlanStore(db)
        self.users = UserService(db)
        self.dispatcher = dispatcher or NotificationDispatcher(db)

    async def create_log(self, client: User, payload: TrainingLogCreate) -> TrainingLog:
        """Record whether the client did the session scheduled on a date.

        Raises:
            NotFoundError: Client has no active plan
            Forbidden: plan_id given but it is not the client's active plan
            ValidationError: Date outside the plan, rest day, future date,
                or a skipped session without a reason
            ConflictError: A log already exists for that session and date
        """
        plan = await self.store.find_active_by_client(client.id)
        if plan is None:
            raise NotFoundError("No active training plan to log against")
        if payload.plan_id is not None and payload.plan_id != plan.id:
            raise Forbidden("This plan is not your active training plan")

        log_date = payload.log_date
        if log_date > local_today():
            raise ValidationError("Cannot log a session for a future date")
        if not plan.covers(log_date):
            raise ValidationError("Date is outside the active plan's date range")

        day_of_week = day_of_week_for(log_date)
        if plan.session_for_day(day_of_week) is None:
            raise ValidationError("No session is scheduled for this date in your active plan")

        reason = (payload.reason or "").strip() or None
        if not payload.is_completed and reason is None:
            raise ValidationError("A reason is required when the session was not completed")

        existing = await self.store.find_log(client.id, plan.id, day_of_week, log_date)
        if existing is not None:
            raise ConflictError(DUPLICATE_LOG_MESSAGE)

        log = TrainingLog(
            client_id=client.id,
            trainer_id=plan.trainer_id,
            plan_id=plan.id,
            day_of_week=day_of_week,
            log_date=log_date,
            is_completed=payload.is_completed,
            reason=None if payload.is_completed else reason,
            proof_image_url=payload.proof_image_url if payload.is_completed else None,
            notes=payload.notes,
            duration_minutes=payload.duration_minutes,
        )

        try:
            await self.store.insert_log(log)
            await self.db.commit()
        except IntegrityError as e:
            # Lost the race against a concurrent submission for the same day
            await self.db.rollback()
            raise ConflictError(DUPLICATE_LOG_MESSAGE) from e

        log_id = log.id
        trainer_id = plan.trainer_id
        logger.info(
            "Client %s logged %s for %s (completed=%s)",
            client.id, plan.id, log_date, payload.is_completed,
        )

        if not payload.is_completed:
            await self.dispatcher.notify(
                trainer_id,
                NotificationAlert(
                    notification_type=NotificationType.MISSED_WORKOUT,
                    title="Client missed a workout",
                    body=(
                        f"{client.name} did not complete the workout of "
                        f"{log_date.isoformat()}. Reason: {reason}"
                    ),
                    link=settings.TRAINER_DASHBOARD_LINK,
                    sender_id=client.id,
                ),
            )

        return await self.store.get_log(log_id)

    @staticmethod
    def _resolve_range(
        year: int | None,
        month: int | None,
        date_from: date | None,
        date_to: date | None,
    ) -> tuple[date | None, date | None]:
        """Month/year wins over an explicit range."""
        if year is not None and month is not None:
            return month_bounds(year, month)
        return date_from, date_to

    async def list_logs(
        self,
        client_id: uuid.UUID,
        year: int | None = None,
        month: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[TrainingLog]:
        """List a client's logs, newest first."""
        start, end = self._resolve_range(year, month, date_from, date_to)
        return await self.store.find_logs(client_id, start, end)

    async def get_stats(
        self,
        client_id: uuid.UUID,
        year: int | None = None,
        month: int | None = None,
    ) -> dict[str, int]:
        """Completion statistics for a client, optionally for one month."""
        start, end = self._resolve_range(year, month, None, None)
        total, completed = await self.store.count_logs(client_id, start, end)
        completion_rate = round(completed / total * 100) if total > 0 else 0
        return {
            "total": total,
            "completed": completed,
            "missed": total - completed,
            "completion_rate": completion_rate,
        }

    async def list_logs_for_client(
        self,
        requesting_user: User,
        client_id: uuid.UUID,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[TrainingLog]:
        """Logs of a client as seen by their trainer (or an admin).

        Raises:
            NotFoundError: Client does not exist
            Forbidden: Requesting trainer is not the client's trainer
        """
        client = await self.users.get_user_by_id(client_id)
        if client is None or client.role != UserRole.CLIENT:
            raise NotFoundError("Client not found")

        if requesting_user.role == UserRole.TRAINER:
            if client.trainer_id != requesting_user.id:
                raise Forbidden("Access denied. This client is not on your list")
        elif requesting_user.role != UserRole.ADMIN and requesting_user.id != client_id:
            raise Forbidden("Access denied")

        return await self.store.find_logs(client_id, date_from, date_to)
