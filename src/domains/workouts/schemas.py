"""Training plan and training log schemas for request/response validation.

Request schemas accept both the camelCase field names sent by the web client
and snake_case, so services only ever see one normalized shape.
"""
from datetime import date, datetime
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from src.core.timeutils import to_local_date


# Plan schemas

class ExerciseInput(BaseModel):
    """Exercise prescription inside a day session.

    Only types are checked here. Non-empty name, sets >= 1 and order are
    plan validator rules.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    sets: int | None = None
    reps: str | None = None
    instructions: str | None = None
    video_url: str | None = Field(
        None,
        max_length=500,
        validation_alias=AliasChoices("video_url", "videoUrl"),
    )
    order: int | None = None

    @field_validator("reps", mode="before")
    @classmethod
    def coerce_reps(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class DaySessionInput(BaseModel):
    """Exercises scheduled for one weekday (0 = Sunday)."""

    model_config = ConfigDict(populate_by_name=True)

    day_of_week: int = Field(validation_alias=AliasChoices("day_of_week", "dayOfWeek"))
    exercises: list[ExerciseInput] = []


class PlanCreate(BaseModel):
    """Create training plan request."""

    model_config = ConfigDict(populate_by_name=True)

    client_id: UUID = Field(validation_alias=AliasChoices("client", "client_id", "clientId"))
    name: str = Field(min_length=1, max_length=255)
    frequency: int
    start_date: date = Field(validation_alias=AliasChoices("start_date", "startDate"))
    end_date: date = Field(validation_alias=AliasChoices("end_date", "endDate"))
    weekly_plan: list[DaySessionInput] = Field(
        default_factory=list,
        validation_alias=AliasChoices("weekly_plan", "weeklyPlan"),
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Plan name cannot be blank")
        return value


class ExerciseResponse(BaseModel):
    """Exercise response."""

    id: UUID
    name: str
    sets: int
    reps: str
    instructions: str | None = None
    video_url: str | None = None
    order: int

    model_config = ConfigDict(from_attributes=True)


class DaySessionResponse(BaseModel):
    """Day session response."""

    id: UUID
    day_of_week: int
    exercises: list[ExerciseResponse]

    model_config = ConfigDict(from_attributes=True)


class PlanResponse(BaseModel):
    """Training plan response."""

    id: UUID
    client_id: UUID
    trainer_id: UUID
    client_name: str | None = None
    trainer_name: str | None = None
    name: str
    frequency: int
    start_date: date
    end_date: date
    is_active: bool
    weekly_plan: list[DaySessionResponse]
    created_at: datetime


class WeeklyPlanResponse(BaseModel):
    """Calendar view of the client's active plan."""

    id: UUID
    name: str
    trainer_name: str | None = None
    frequency: int
    start_date: date
    end_date: date
    weekly_plan: list[DaySessionResponse]


# Training log schemas

class TrainingLogCreate(BaseModel):
    """Client check-in for a scheduled session."""

    model_config = ConfigDict(populate_by_name=True)

    log_date: date = Field(validation_alias=AliasChoices("date", "log_date"))
    is_completed: bool = Field(validation_alias=AliasChoices("is_completed", "isCompleted"))
    reason: str | None = Field(
        None,
        max_length=1000,
        validation_alias=AliasChoices("reason", "reasonNotCompleted", "reason_not_completed"),
    )
    proof_image_url: str | None = Field(
        None,
        max_length=500,
        validation_alias=AliasChoices("proof_image_url", "proofImageURL", "proofImageUrl", "proofImage"),
    )
    notes: str | None = Field(None, max_length=2000)
    duration_minutes: int | None = Field(
        None,
        ge=1,
        le=600,
        validation_alias=AliasChoices("duration_minutes", "duration"),
    )
    plan_id: UUID | None = Field(None, validation_alias=AliasChoices("plan_id", "planId"))

    @field_validator("log_date", mode="before")
    @classmethod
    def truncate_to_day(cls, value):
        if isinstance(value, str) and "T" in value:
            value = datetime.fromisoformat(value)
        if isinstance(value, datetime):
            return to_local_date(value)
        return value


class TrainingLogResponse(BaseModel):
    """Training log response."""

    id: UUID
    client_id: UUID
    trainer_id: UUID
    plan_id: UUID
    plan_name: str | None = None
    day_of_week: int
    log_date: date
    is_completed: bool
    reason: str | None = None
    proof_image_url: str | None = None
    notes: str | None = None
    duration_minutes: int | None = None
    created_at: datetime


class TrainingLogStatsResponse(BaseModel):
    """Completion statistics for a client."""

    total: int
    completed: int
    missed: int
    completion_rate: int
