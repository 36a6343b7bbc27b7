"""Persistence operations for training plans and training logs."""
import uuid
from dataclasses import dataclass
from datetime import date

from sqlalchemy import and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.domains.workouts.models import PlanSession, TrainingLog, TrainingPlan


@dataclass
class PlanFilter:
    """Filter for plan queries. None means "don't filter on this"."""

    client_id: uuid.UUID | None = None
    trainer_id: uuid.UUID | None = None
    day_of_week: int | None = None
    active_only: bool = False


class PlanStore:
    """Query and write training plans and logs.

    Writes are staged on the session (add / flush) and never committed here;
    the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # Plans

    def _plan_query(self):
        return select(TrainingPlan).options(
            selectinload(TrainingPlan.sessions).selectinload(PlanSession.exercises)
        )

    async def insert(self, plan: TrainingPlan) -> TrainingPlan:
        """Stage a new plan and flush to assign its primary key."""
        self.db.add(plan)
        await self.db.flush()
        return plan

    async def bulk_deactivate(self, client_id: uuid.UUID) -> int:
        """Deactivate every active plan of a client.

        Returns:
            Number of plans deactivated
        """
        result = await self.db.execute(
            update(TrainingPlan)
            .where(
                and_(
                    TrainingPlan.client_id == client_id,
                    TrainingPlan.is_active == True,  # noqa: E712
                )
            )
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def get_by_id(self, plan_id: uuid.UUID) -> TrainingPlan | None:
        result = await self.db.execute(
            self._plan_query()
            .where(TrainingPlan.id == plan_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_active_by_client(self, client_id: uuid.UUID) -> TrainingPlan | None:
        """Get the client's active plan (newest first if the invariant was ever broken)."""
        result = await self.db.execute(
            self._plan_query()
            .where(
                TrainingPlan.client_id == client_id,
                TrainingPlan.is_active == True,  # noqa: E712
            )
            .order_by(TrainingPlan.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def find_by_filter(self, plan_filter: PlanFilter) -> list[TrainingPlan]:
        """List plans matching the filter, most recently created first."""
        query = self._plan_query()

        if plan_filter.client_id is not None:
            query = query.where(TrainingPlan.client_id == plan_filter.client_id)
        if plan_filter.trainer_id is not None:
            query = query.where(TrainingPlan.trainer_id == plan_filter.trainer_id)
        if plan_filter.active_only:
            query = query.where(TrainingPlan.is_active == True)  # noqa: E712
        if plan_filter.day_of_week is not None:
            query = query.where(
                TrainingPlan.sessions.any(PlanSession.day_of_week == plan_filter.day_of_week)
            )

        query = query.order_by(TrainingPlan.created_at.desc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def find_active_on(self, day: date) -> list[TrainingPlan]:
        """Active plans whose [start_date, end_date] window contains the day."""
        result = await self.db.execute(
            self._plan_query()
            .where(
                TrainingPlan.is_active == True,  # noqa: E712
                TrainingPlan.start_date <= day,
                TrainingPlan.end_date >= day,
            )
            .order_by(TrainingPlan.trainer_id, TrainingPlan.created_at)
        )
        return list(result.scalars().all())

    # Logs

    async def find_log(
        self,
        client_id: uuid.UUID,
        plan_id: uuid.UUID,
        day_of_week: int,
        log_date: date,
    ) -> TrainingLog | None:
        """Find the log for one client session on one calendar day."""
        result = await self.db.execute(
            select(TrainingLog).where(
                TrainingLog.client_id == client_id,
                TrainingLog.plan_id == plan_id,
                TrainingLog.day_of_week == day_of_week,
                TrainingLog.log_date == log_date,
            )
        )
        return result.scalars().first()

    async def get_log(self, log_id: uuid.UUID) -> TrainingLog | None:
        result = await self.db.execute(
            select(TrainingLog)
            .where(TrainingLog.id == log_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def insert_log(self, log: TrainingLog) -> TrainingLog:
        """Stage a new log and flush; raises IntegrityError on a duplicate day."""
        self.db.add(log)
        await self.db.flush()
        return log

    def _log_conditions(
        self,
        client_id: uuid.UUID,
        date_from: date | None,
        date_to: date | None,
    ) -> list:
        conditions = [TrainingLog.client_id == client_id]
        if date_from is not None:
            conditions.append(TrainingLog.log_date >= date_from)
        if date_to is not None:
            conditions.append(TrainingLog.log_date <= date_to)
        return conditions

    async def find_logs(
        self,
        client_id: uuid.UUID,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[TrainingLog]:
        """List a client's logs inside an optional date range, newest first."""
        result = await self.db.execute(
            select(TrainingLog)
            .where(and_(*self._log_conditions(client_id, date_from, date_to)))
            .order_by(TrainingLog.log_date.desc(), TrainingLog.created_at.desc())
        )
        return list(result.scalars().all())

    async def count_logs(
        self,
        client_id: uuid.UUID,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> tuple[int, int]:
        """Count a client's logs.

        Returns:
            Tuple of (total, completed)
        """
        conditions = self._log_conditions(client_id, date_from, date_to)
        total = await self.db.scalar(
            select(func.count(TrainingLog.id)).where(and_(*conditions))
        )
        completed = await self.db.scalar(
            select(func.count(TrainingLog.id)).where(
                and_(*conditions, TrainingLog.is_completed == True)  # noqa: E712
            )
        )
        return total or 0, completed or 0
