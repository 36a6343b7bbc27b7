"""Training log endpoints: client check-ins, history and statistics."""
from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import get_db
from src.config.settings import settings
from src.core.redis import RateLimiter
from src.domains.auth.dependencies import ClientUser, StaffUser
from src.domains.workouts.log_service import TrainingLogService
from src.domains.workouts.models import TrainingLog
from src.domains.workouts.schemas import (
    TrainingLogCreate,
    TrainingLogResponse,
    TrainingLogStatsResponse,
)

logs_router = APIRouter()


def _log_to_response(log: TrainingLog) -> TrainingLogResponse:
    return TrainingLogResponse(
        id=log.id,
        client_id=log.client_id,
        trainer_id=log.trainer_id,
        plan_id=log.plan_id,
        plan_name=log.plan.name if log.plan else None,
        day_of_week=log.day_of_week,
        log_date=log.log_date,
        is_completed=log.is_completed,
        reason=log.reason,
        proof_image_url=log.proof_image_url,
        notes=log.notes,
        duration_minutes=log.duration_minutes,
        created_at=log.created_at,
    )


@logs_router.post("/logs", response_model=TrainingLogResponse, status_code=status.HTTP_201_CREATED)
async def create_log(
    request: TrainingLogCreate,
    current_user: ClientUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TrainingLogResponse:
    """Log whether the scheduled session of a day was done."""
    limit = settings.LOG_CREATE_LIMIT_PER_HOUR
    is_allowed, current_count = await RateLimiter.check_rate_limit(
        identifier=str(current_user.id),
        action="training_log_create",
        max_requests=limit,
        window_seconds=3600,
    )
    if not is_allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many check-ins. Try again later. ({current_count}/{limit} per hour)",
        )

    log = await TrainingLogService(db).create_log(current_user, request)
    return _log_to_response(log)


@logs_router.get("/logs", response_model=list[TrainingLogResponse])
async def list_my_logs(
    current_user: ClientUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    year: Annotated[int | None, Query(ge=2000, le=2100)] = None,
    month: Annotated[int | None, Query(ge=1, le=12)] = None,
    date_from: Annotated[date | None, Query()] = None,
    date_to: Annotated[date | None, Query()] = None,
) -> list[TrainingLogResponse]:
    """List the client's own logs. year+month wins over date_from/date_to."""
    logs = await TrainingLogService(db).list_logs(
        current_user.id,
        year=year,
        month=month,
        date_from=date_from,
        date_to=date_to,
    )
    return [_log_to_response(log) for log in logs]


@logs_router.get("/logs/stats", response_model=TrainingLogStatsResponse)
async def get_my_stats(
    current_user: ClientUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    year: Annotated[int | None, Query(ge=2000, le=2100)] = None,
    month: Annotated[int | None, Query(ge=1, le=12)] = None,
) -> TrainingLogStatsResponse:
    stats = await TrainingLogService(db).get_stats(current_user.id, year=year, month=month)
    return TrainingLogStatsResponse(**stats)


@logs_router.get("/logs/clients/{client_id}", response_model=list[TrainingLogResponse])
async def list_client_logs(
    client_id: UUID,
    current_user: StaffUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    date_from: Annotated[date | None, Query()] = None,
    date_to: Annotated[date | None, Query()] = None,
) -> list[TrainingLogResponse]:
    """List a client's logs (their trainer or an admin)."""
    logs = await TrainingLogService(db).list_logs_for_client(
        current_user,
        client_id,
        date_from=date_from,
        date_to=date_to,
    )
    return [_log_to_response(log) for log in logs]
