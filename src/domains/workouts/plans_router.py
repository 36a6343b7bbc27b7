"""Training plan endpoints: creation, scoped listing and the client's active plan."""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import get_db
from src.config.settings import settings
from src.core.redis import RateLimiter
from src.domains.auth.dependencies import ClientUser, CurrentUser, TrainerUser
from src.domains.workouts.models import TrainingPlan
from src.domains.workouts.plan_service import PlanService
from src.domains.workouts.schemas import (
    DaySessionResponse,
    PlanCreate,
    PlanResponse,
    WeeklyPlanResponse,
)

plans_router = APIRouter()


def _plan_to_response(plan: TrainingPlan) -> PlanResponse:
    return PlanResponse(
        id=plan.id,
        client_id=plan.client_id,
        trainer_id=plan.trainer_id,
        client_name=plan.client.name if plan.client else None,
        trainer_name=plan.trainer.name if plan.trainer else None,
        name=plan.name,
        frequency=plan.frequency,
        start_date=plan.start_date,
        end_date=plan.end_date,
        is_active=plan.is_active,
        weekly_plan=[DaySessionResponse.model_validate(s) for s in plan.sessions],
        created_at=plan.created_at,
    )


@plans_router.post("/plans", response_model=PlanResponse, status_code=status.HTTP_201_CREATED)
async def create_plan(
    request: PlanCreate,
    current_user: TrainerUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PlanResponse:
    """Create and activate a weekly plan for one of the trainer's clients."""
    limit = settings.PLAN_CREATE_LIMIT_PER_HOUR
    is_allowed, current_count = await RateLimiter.check_rate_limit(
        identifier=str(current_user.id),
        action="plan_create",
        max_requests=limit,
        window_seconds=3600,
    )
    if not is_allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Plan creation limit exceeded. Try again later. ({current_count}/{limit} per hour)",
        )

    plan = await PlanService(db).create_plan(current_user.id, request)
    return _plan_to_response(plan)


@plans_router.get("/plans", response_model=list[PlanResponse])
async def list_plans(
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    client_id: Annotated[UUID | None, Query()] = None,
    day_of_week: Annotated[int | None, Query(ge=0, le=6)] = None,
) -> list[PlanResponse]:
    """List plans visible to the current user, newest first."""
    plans = await PlanService(db).list_plans(
        current_user,
        client_id=client_id,
        day_of_week=day_of_week,
    )
    return [_plan_to_response(p) for p in plans]


@plans_router.get("/plans/active", response_model=WeeklyPlanResponse)
async def get_active_plan(
    current_user: ClientUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WeeklyPlanResponse:
    """Get the client's active weekly plan."""
    plan = await PlanService(db).get_active_weekly_plan(current_user.id)
    return WeeklyPlanResponse(
        id=plan.id,
        name=plan.name,
        trainer_name=plan.trainer.name if plan.trainer else None,
        frequency=plan.frequency,
        start_date=plan.start_date,
        end_date=plan.end_date,
        weekly_plan=[DaySessionResponse.model_validate(s) for s in plan.sessions],
    )


@plans_router.get("/plans/{plan_id}", response_model=PlanResponse)
async def get_plan(
    plan_id: UUID,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PlanResponse:
    plan = await PlanService(db).get_plan(current_user, plan_id)
    return _plan_to_response(plan)
