"""Daily workout-compliance sweep.

For a reference day, every active plan with a session scheduled on that
weekday is classified as completed, missed (logged as not done) or unmarked
(no log at all), and the client's trainer is told about it.

Classification runs to completion before anything is dispatched: a failed
dispatch rolls the session back, which would expire the ORM objects the
classification still needs.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import settings
from src.core.exceptions import DispatchError
from src.core.timeutils import local_today, local_yesterday
from src.domains.notifications.dispatcher import NotificationDispatcher
from src.domains.notifications.models import NotificationType
from src.domains.notifications.schemas import NotificationAlert
from src.domains.workouts.models import TrainingPlan, day_of_week_for
from src.domains.workouts.repository import PlanStore

logger = logging.getLogger(__name__)

DEFAULT_MISSED_REASON = "Not specified"


@dataclass
class ClientOutcome:
    """What one client did with the session scheduled on the reference day."""

    client_id: uuid.UUID
    client_name: str
    plan_id: uuid.UUID
    reason: str | None = None


@dataclass
class TrainerDigest:
    """Outcomes of one trainer's clients, by category."""

    trainer_id: uuid.UUID
    completed: list[ClientOutcome] = field(default_factory=list)
    missed: list[ClientOutcome] = field(default_factory=list)
    unmarked: list[ClientOutcome] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.completed or self.missed or self.unmarked)


@dataclass
class ScanResult:
    reference_date: date
    notifications_created: int = 0
    failed: int = 0


def format_day(day: date) -> str:
    return day.strftime("%d/%m/%Y")


def build_summary(digest: TrainerDigest) -> str:
    """One-line summary: completed | missed (with reasons) | unmarked."""
    parts = []
    if digest.completed:
        names = ", ".join(o.client_name for o in digest.completed)
        parts.append(f"Completed ({len(digest.completed)}): {names}")
    if digest.missed:
        details = "; ".join(f"{o.client_name} ({o.reason})" for o in digest.missed)
        parts.append(f"Missed ({len(digest.missed)}): {details}")
    if digest.unmarked:
        names = ", ".join(o.client_name for o in digest.unmarked)
        parts.append(f"Unmarked ({len(digest.unmarked)}): {names}")
    return " | ".join(parts)


class ComplianceScanner:
    """Classify scheduled sessions for a day and alert trainers."""

    def __init__(
        self,
        db: AsyncSession,
        dispatcher: NotificationDispatcher | None = None,
    ):
        self.db = db
        self.store = PlanStore(db)
        self.dispatcher = dispatcher or NotificationDispatcher(db)

    async def classify(self, reference_date: date) -> dict[uuid.UUID, TrainerDigest]:
        """Group today's scheduled sessions by trainer and outcome.

        Plans on a rest day, or whose window does not contain the reference
        date, are skipped.
        """
        day_of_week = day_of_week_for(reference_date)
        plans = await self.store.find_active_on(reference_date)

        digests: dict[uuid.UUID, TrainerDigest] = {}
        for plan in plans:
            if not plan.covers(reference_date):
                continue
            if plan.session_for_day(day_of_week) is None:
                continue

            digest = digests.setdefault(plan.trainer_id, TrainerDigest(plan.trainer_id))
            outcome = ClientOutcome(
                client_id=plan.client_id,
                client_name=self._client_name(plan),
                plan_id=plan.id,
            )

            log = await self.store.find_log(plan.client_id, plan.id, day_of_week, reference_date)
            if log is None:
                digest.unmarked.append(outcome)
            elif log.is_completed:
                digest.completed.append(outcome)
            else:
                outcome.reason = log.reason or DEFAULT_MISSED_REASON
                digest.missed.append(outcome)

        return digests

    @staticmethod
    def _client_name(plan: TrainingPlan) -> str:
        if plan.client is not None and plan.client.name:
            return plan.client.name
        return str(plan.client_id)

    async def scan_today(self, reference_date: date | None = None) -> ScanResult:
        """Send each trainer one summary of today's sessions."""
        reference_date = reference_date or local_today()
        digests = await self.classify(reference_date)
        result = ScanResult(reference_date=reference_date)

        for trainer_id, digest in digests.items():
            if digest.is_empty:
                continue
            alert = NotificationAlert(
                notification_type=NotificationType.COMPLIANCE_SUMMARY,
                title=f"Workout summary - {format_day(reference_date)}",
                body=build_summary(digest),
                link=settings.TRAINER_DASHBOARD_LINK,
            )
            try:
                await self.dispatcher.dispatch(trainer_id, alert)
                result.notifications_created += 1
            except DispatchError as e:
                result.failed += 1
                logger.error("Summary dispatch failed for trainer %s: %s", trainer_id, e)

        logger.info(
            "Today scan for %s: %d notification(s) created, %d failed",
            reference_date, result.notifications_created, result.failed,
        )
        return result

    async def scan_missed(self, reference_date: date | None = None) -> ScanResult:
        """Alert trainers about every session left unmarked yesterday."""
        reference_date = reference_date or local_yesterday()
        digests = await self.classify(reference_date)
        result = ScanResult(reference_date=reference_date)

        for trainer_id, digest in digests.items():
            for outcome in digest.unmarked:
                alert = NotificationAlert(
                    notification_type=NotificationType.WORKOUT_UNMARKED,
                    title="Workout not logged",
                    body=(
                        f"{outcome.client_name} did not log the workout of "
                        f"{format_day(reference_date)}. The client may have forgotten to mark it."
                    ),
                    link=settings.TRAINER_DASHBOARD_LINK,
                    sender_id=outcome.client_id,
                )
                try:
                    await self.dispatcher.dispatch(trainer_id, alert)
                    result.notifications_created += 1
                except DispatchError as e:
                    result.failed += 1
                    logger.error(
                        "Unmarked-workout dispatch failed for trainer %s (client %s): %s",
                        trainer_id, outcome.client_id, e,
                    )

        logger.info(
            "Missed scan for %s: %d notification(s) created, %d failed",
            reference_date, result.notifications_created, result.failed,
        )
        return result
