"""Celery application configuration for the scheduled compliance sweeps.

Usage:
    # Start worker with beat scheduler (for development):
    celery -A src.core.celery_app worker -B -l info

    # Production (separate worker and beat):
    celery -A src.core.celery_app worker -l info
    celery -A src.core.celery_app beat -l info
"""
from celery import Celery
from celery.schedules import crontab

# Load environment variables
from dotenv import load_dotenv

load_dotenv()

from src.config.settings import settings  # noqa: E402

# Create Celery app
celery_app = Celery(
    "fitcoach",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=[
        "src.tasks.compliance",
    ],
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    # Crontab hours below are read in the same zone the sweep uses for "today"
    timezone=settings.COMPLIANCE_TIMEZONE,
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,  # Acknowledge after task completes
    task_reject_on_worker_lost=True,
    task_time_limit=300,
    task_soft_time_limit=240,

    # Worker settings
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=100,

    # Result backend settings
    result_expires=3600,

    # Beat scheduler settings
    beat_scheduler="celery.beat:PersistentScheduler",
    beat_schedule_filename="celerybeat-schedule",
)

# Scheduled tasks (Celery Beat)
celery_app.conf.beat_schedule = {
    # End-of-day summary per trainer
    "check-today-workouts-daily": {
        "task": "src.tasks.compliance.check_today_workouts",
        "schedule": crontab(minute=0, hour=settings.TODAY_SCAN_HOUR),
    },

    # Unlogged sessions of the previous day
    "check-missed-workouts-daily": {
        "task": "src.tasks.compliance.check_missed_workouts",
        "schedule": crontab(minute=0, hour=settings.MISSED_SCAN_HOUR),
    },
}
