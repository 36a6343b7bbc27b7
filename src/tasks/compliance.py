"""Scheduled workout-compliance sweeps.

These tasks handle:
- End-of-day summary to each trainer (completed / missed / unmarked clients)
- Next-day alert for every scheduled session nobody logged
"""
import asyncio
import logging
from datetime import date

from src.core.celery_app import celery_app

logger = logging.getLogger(__name__)


def run_async(coro):
    """Run async function in sync context."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@celery_app.task(bind=True, max_retries=3, default_retry_delay=60)
def check_today_workouts(self, reference_date: str | None = None):
    """Send each trainer a summary of today's scheduled sessions.

    Runs daily at TODAY_SCAN_HOUR (23h by default).
    """
    logger.info("Starting today workouts check")
    try:
        return run_async(_run_scan("today", reference_date))
    except Exception as exc:
        raise self.retry(exc=exc)


@celery_app.task(bind=True, max_retries=3, default_retry_delay=60)
def check_missed_workouts(self, reference_date: str | None = None):
    """Alert trainers about yesterday's sessions that were never logged.

    Runs daily at MISSED_SCAN_HOUR (midnight by default).
    """
    logger.info("Starting missed workouts check")
    try:
        return run_async(_run_scan("missed", reference_date))
    except Exception as exc:
        raise self.retry(exc=exc)


async def _run_scan(mode: str, reference_date: str | None = None) -> dict:
    """Open a fresh engine on this loop and run one scan."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

    from src.config.database import _get_async_database_url
    from src.config.settings import settings
    from src.core.observability import capture_exception
    from src.domains.compliance.scanner import ComplianceScanner

    engine = create_async_engine(_get_async_database_url(settings.DATABASE_URL))
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    day = date.fromisoformat(reference_date) if reference_date else None

    try:
        async with session_factory() as db:
            scanner = ComplianceScanner(db)
            if mode == "today":
                result = await scanner.scan_today(day)
            else:
                result = await scanner.scan_missed(day)
    except Exception as e:
        logger.error("Error in %s workouts check: %s", mode, e)
        capture_exception(e, tags={"task": f"compliance_{mode}"})
        raise
    finally:
        await engine.dispose()

    logger.info(
        "%s workouts check for %s: created=%d, failed=%d",
        mode.capitalize(), result.reference_date, result.notifications_created, result.failed,
    )
    return {
        "reference_date": result.reference_date.isoformat(),
        "notifications_created": result.notifications_created,
        "failed": result.failed,
    }
