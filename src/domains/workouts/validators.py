"""Weekly training plan validation.

Pure checks run before a plan is persisted. Rules are evaluated in a fixed
order and the first violation is raised; there is no aggregate error list,
the trainer fixes one problem and resubmits.

Rule order:
1. frequency in {3, 4, 5}
2. number of sessions == frequency
3. day_of_week values are unique
4. day_of_week values are in [0, 6]
5. every session has 1-10 complete exercises
6. start_date < end_date
7. plan lasts at least 7 days
8. plan lasts at most 365 days
"""
import enum
from dataclasses import dataclass, field
from datetime import date

from src.core.exceptions import ValidationError
from src.domains.workouts.models import (
    ALLOWED_FREQUENCIES,
    MAX_EXERCISES_PER_SESSION,
    MAX_PLAN_DAYS,
    MIN_PLAN_DAYS,
)
from src.domains.workouts.schemas import DaySessionInput, ExerciseInput, PlanCreate


class PlanRule(str, enum.Enum):
    """Plan validation rules, in evaluation order."""

    INVALID_FREQUENCY = "InvalidFrequency"
    DAY_COUNT_MISMATCH = "DayCountMismatch"
    DUPLICATE_DAY = "DuplicateDay"
    DAY_OUT_OF_RANGE = "DayOutOfRange"
    INVALID_EXERCISE = "InvalidExercise"
    DATE_ORDER_INVALID = "DateOrderInvalid"
    DURATION_TOO_SHORT = "DurationTooShort"
    DURATION_TOO_LONG = "DurationTooLong"


class PlanValidationError(ValidationError):
    """A plan payload violated a validation rule.

    Attributes:
        rule: The first rule that failed
    """

    code = "plan_validation_error"

    def __init__(self, rule: PlanRule, message: str):
        self.rule = rule
        super().__init__(message)

    def to_dict(self) -> dict:
        return {**super().to_dict(), "rule": self.rule.value}


@dataclass
class ValidatedExercise:
    name: str
    sets: int
    reps: str
    order: int
    instructions: str | None = None
    video_url: str | None = None


@dataclass
class ValidatedSession:
    day_of_week: int
    exercises: list[ValidatedExercise] = field(default_factory=list)


@dataclass
class ValidatedPlan:
    """A plan payload that passed every rule, normalized for persistence.

    Sessions are sorted by day_of_week and exercises by order.
    """

    frequency: int
    start_date: date
    end_date: date
    sessions: list[ValidatedSession]


def validate_frequency(frequency: int) -> None:
    if frequency not in ALLOWED_FREQUENCIES:
        raise PlanValidationError(
            PlanRule.INVALID_FREQUENCY,
            f"Frequency must be one of {', '.join(str(f) for f in ALLOWED_FREQUENCIES)} sessions per week",
        )


def validate_day_count(frequency: int, weekly_plan: list[DaySessionInput]) -> None:
    if len(weekly_plan) != frequency:
        raise PlanValidationError(
            PlanRule.DAY_COUNT_MISMATCH,
            f"Weekly plan must have exactly {frequency} training days (got {len(weekly_plan)})",
        )


def validate_unique_days(weekly_plan: list[DaySessionInput]) -> None:
    seen: set[int] = set()
    for session in weekly_plan:
        if session.day_of_week in seen:
            raise PlanValidationError(
                PlanRule.DUPLICATE_DAY,
                f"Day {session.day_of_week} appears more than once in the weekly plan",
            )
        seen.add(session.day_of_week)


def validate_day_range(weekly_plan: list[DaySessionInput]) -> None:
    for session in weekly_plan:
        if not 0 <= session.day_of_week <= 6:
            raise PlanValidationError(
                PlanRule.DAY_OUT_OF_RANGE,
                f"Day of week must be between 0 (Sunday) and 6 (Saturday), got {session.day_of_week}",
            )


def _exercise_problem(exercise: ExerciseInput) -> str | None:
    if not exercise.name or not exercise.name.strip():
        return "exercise name is required"
    if exercise.sets is None or exercise.sets < 1:
        return f"'{exercise.name}' must have at least 1 set"
    if exercise.reps is None or not exercise.reps.strip():
        return f"'{exercise.name}' must define reps"
    if exercise.order is None:
        return f"'{exercise.name}' must define its order"
    return None


def validate_exercises(weekly_plan: list[DaySessionInput]) -> None:
    for session in weekly_plan:
        count = len(session.exercises)
        if count < 1 or count > MAX_EXERCISES_PER_SESSION:
            raise PlanValidationError(
                PlanRule.INVALID_EXERCISE,
                f"Day {session.day_of_week} must have between 1 and "
                f"{MAX_EXERCISES_PER_SESSION} exercises (got {count})",
            )
        for exercise in session.exercises:
            problem = _exercise_problem(exercise)
            if problem:
                raise PlanValidationError(
                    PlanRule.INVALID_EXERCISE,
                    f"Invalid exercise on day {session.day_of_week}: {problem}",
                )


def validate_dates(start_date: date, end_date: date) -> None:
    if start_date >= end_date:
        raise PlanValidationError(
            PlanRule.DATE_ORDER_INVALID,
            "Start date must be before end date",
        )

    duration = (end_date - start_date).days
    if duration < MIN_PLAN_DAYS:
        raise PlanValidationError(
            PlanRule.DURATION_TOO_SHORT,
            f"Plan must last at least 1 week ({MIN_PLAN_DAYS} days), got {duration} days",
        )
    if duration > MAX_PLAN_DAYS:
        raise PlanValidationError(
            PlanRule.DURATION_TOO_LONG,
            f"Plan cannot last more than 1 year ({MAX_PLAN_DAYS} days), got {duration} days",
        )


def validate_plan(payload: PlanCreate) -> ValidatedPlan:
    """Run every plan rule in order.

    Args:
        payload: Normalized plan request

    Returns:
        ValidatedPlan ready to be persisted

    Raises:
        PlanValidationError: On the first violated rule
    """
    validate_frequency(payload.frequency)
    validate_day_count(payload.frequency, payload.weekly_plan)
    validate_unique_days(payload.weekly_plan)
    validate_day_range(payload.weekly_plan)
    validate_exercises(payload.weekly_plan)
    validate_dates(payload.start_date, payload.end_date)

    sessions = [
        ValidatedSession(
            day_of_week=session.day_of_week,
            exercises=[
                ValidatedExercise(
                    name=exercise.name.strip(),
                    sets=exercise.sets,
                    reps=exercise.reps.strip(),
                    order=exercise.order,
                    instructions=exercise.instructions or None,
                    video_url=exercise.video_url or None,
                )
                for exercise in sorted(session.exercises, key=lambda e: e.order)
            ],
        )
        for session in sorted(payload.weekly_plan, key=lambda s: s.day_of_week)
    ]

    return ValidatedPlan(
        frequency=payload.frequency,
        start_date=payload.start_date,
        end_date=payload.end_date,
        sessions=sessions,
    )
