"""Training plan operations: creation, activation and role-scoped queries."""
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import settings
from src.core.exceptions import Forbidden, NotClientsTrainer, NotFoundError, ValidationError
from src.domains.notifications.dispatcher import NotificationDispatcher
from src.domains.notifications.models import NotificationType
from src.domains.notifications.schemas import NotificationAlert
from src.domains.users.models import User, UserRole
from src.domains.users.service import UserService
from src.domains.workouts.models import PlanExercise, PlanSession, TrainingPlan
from src.domains.workouts.repository import PlanFilter, PlanStore
from src.domains.workouts.schemas import PlanCreate
from src.domains.workouts.validators import ValidatedPlan, validate_plan

logger = logging.getLogger(__name__)


class PlanService:
    """Service for training plan operations."""

    def __init__(
        self,
        db: AsyncSession,
        dispatcher: NotificationDispatcher | None = None,
    ):
        self.db = db
        self.store = PlanStore(db)
        self.users = UserService(db)
        self.dispatcher = dispatcher or NotificationDispatcher(db)

    async def create_plan(self, trainer_id: uuid.UUID, payload: PlanCreate) -> TrainingPlan:
        """Create and activate a plan for a client.

        The first trainer to create a plan for an unassigned client becomes
        that client's trainer. Any previously active plan of the client is
        deactivated in the same transaction as the insert.

        Raises:
            NotFoundError: Client does not exist
            ValidationError: Target user is not a client
            NotClientsTrainer: Client belongs to another trainer
            PlanValidationError: First violated plan rule
        """
        client = await self.users.get_user_by_id(payload.client_id)
        if client is None:
            raise NotFoundError("Client not found")
        if client.role != UserRole.CLIENT:
            raise ValidationError("Plans can only be created for clients")

        if client.trainer_id is not None and client.trainer_id != trainer_id:
            raise NotClientsTrainer(
                "You are not this client's trainer and cannot create plans for them"
            )

        validated = validate_plan(payload)

        if client.trainer_id is None:
            self.users.assign_trainer(client, trainer_id)

        deactivated = await self.store.bulk_deactivate(client.id)
        plan = await self.store.insert(
            self._build_plan(client.id, trainer_id, payload.name, validated)
        )
        await self.db.commit()

        plan_id = plan.id
        client_id = client.id
        logger.info(
            "Created plan %s for client %s by trainer %s (deactivated %d)",
            plan_id, client_id, trainer_id, deactivated,
        )

        await self.dispatcher.notify(
            client_id,
            NotificationAlert(
                notification_type=NotificationType.PLAN_ASSIGNED,
                title="New training plan",
                body=f"Your trainer published a new plan: {plan.name}",
                link=settings.CLIENT_PLAN_LINK,
                sender_id=trainer_id,
            ),
        )

        return await self.store.get_by_id(plan_id)

    @staticmethod
    def _build_plan(
        client_id: uuid.UUID,
        trainer_id: uuid.UUID,
        name: str,
        validated: ValidatedPlan,
    ) -> TrainingPlan:
        return TrainingPlan(
            client_id=client_id,
            trainer_id=trainer_id,
            name=name,
            frequency=validated.frequency,
            start_date=validated.start_date,
            end_date=validated.end_date,
            is_active=True,
            sessions=[
                PlanSession(
                    day_of_week=session.day_of_week,
                    exercises=[
                        PlanExercise(
                            name=exercise.name,
                            sets=exercise.sets,
                            reps=exercise.reps,
                            instructions=exercise.instructions,
                            video_url=exercise.video_url,
                            order=exercise.order,
                        )
                        for exercise in session.exercises
                    ],
                )
                for session in validated.sessions
            ],
        )

    async def list_plans(
        self,
        requesting_user: User,
        client_id: uuid.UUID | None = None,
        day_of_week: int | None = None,
    ) -> list[TrainingPlan]:
        """List plans visible to the requesting user, newest first.

        - client: own active plans only
        - trainer: plans they authored; client_id must be one of their clients
        - admin: everything
        """
        plan_filter = PlanFilter(day_of_week=day_of_week)

        if requesting_user.role == UserRole.CLIENT:
            plan_filter.client_id = requesting_user.id
            plan_filter.active_only = True
        elif requesting_user.role == UserRole.TRAINER:
            plan_filter.trainer_id = requesting_user.id
            if client_id is not None:
                if not await self.users.is_client_of_trainer(requesting_user.id, client_id):
                    raise Forbidden("Access denied. This client is not on your list")
                plan_filter.client_id = client_id
        elif requesting_user.role == UserRole.ADMIN:
            plan_filter.client_id = client_id
        else:
            raise Forbidden("Access denied")

        return await self.store.find_by_filter(plan_filter)

    async def get_active_weekly_plan(self, client_id: uuid.UUID) -> TrainingPlan:
        """Get the client's active plan.

        Raises:
            NotFoundError: Client has no active plan
        """
        plan = await self.store.find_active_by_client(client_id)
        if plan is None:
            raise NotFoundError("No active training plan found")
        return plan

    async def get_plan(self, requesting_user: User, plan_id: uuid.UUID) -> TrainingPlan:
        """Get one plan if the user may see it (its client, its trainer, or an admin)."""
        plan = await self.store.get_by_id(plan_id)
        if plan is None:
            raise NotFoundError("Training plan not found")

        if requesting_user.role == UserRole.ADMIN:
            return plan
        if requesting_user.id in (plan.client_id, plan.trainer_id):
            return plan
        raise Forbidden("Access denied")
