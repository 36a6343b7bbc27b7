"""Tests for weekly plan validation rules."""
import uuid
from datetime import date

import pytest

from src.domains.workouts.schemas import PlanCreate
from src.domains.workouts.validators import (
    PlanRule,
    PlanValidationError,
    validate_dates,
    validate_plan,
)


@pytest.fixture
def build(plan_payload):
    """Build a PlanCreate from the camelCase payload helper."""

    def _build(**kwargs) -> PlanCreate:
        payload = plan_payload(uuid.uuid4(), **kwargs)
        return PlanCreate.model_validate(payload)

    return _build


def _rule_of(plan: PlanCreate) -> PlanRule:
    with pytest.raises(PlanValidationError) as exc_info:
        validate_plan(plan)
    return exc_info.value.rule


class TestValidPlan:
    """A well-formed plan passes and is normalized."""

    def test_valid_plan_is_normalized(self, build):
        plan = build(days=[5, 1, 3], start=date(2025, 1, 1), end=date(2025, 3, 1))

        validated = validate_plan(plan)

        assert validated.frequency == 3
        assert [s.day_of_week for s in validated.sessions] == [1, 3, 5]
        assert validated.sessions[0].exercises[1].reps == "10"

    def test_exercises_sorted_by_order(self, plan_payload):
        payload = plan_payload(uuid.uuid4(), start=date(2025, 1, 1), end=date(2025, 2, 1))
        payload["weeklyPlan"][0]["exercises"] = [
            {"name": "Deadlift", "sets": 3, "reps": "5", "order": 2},
            {"name": "Row", "sets": 3, "reps": "12", "order": 1},
        ]

        validated = validate_plan(PlanCreate.model_validate(payload))

        assert [e.name for e in validated.sessions[0].exercises] == ["Row", "Deadlift"]

    def test_snake_case_payload_accepted(self):
        plan = PlanCreate.model_validate({
            "client_id": str(uuid.uuid4()),
            "name": "Base",
            "frequency": 3,
            "start_date": "2025-01-01",
            "end_date": "2025-02-01",
            "weekly_plan": [
                {"day_of_week": d, "exercises": [{"name": "Squat", "sets": 3, "reps": "5", "order": 1}]}
                for d in (0, 2, 4)
            ],
        })

        assert len(validate_plan(plan).sessions) == 3


class TestRules:
    """Each rule fires on its own violation."""

    def test_invalid_frequency(self, build):
        assert _rule_of(build(days=[1, 2], frequency=2)) == PlanRule.INVALID_FREQUENCY

    def test_day_count_mismatch(self, build):
        assert _rule_of(build(days=[1, 3, 5], frequency=4)) == PlanRule.DAY_COUNT_MISMATCH

    def test_duplicate_day(self, build):
        assert _rule_of(build(days=[1, 1, 3])) == PlanRule.DUPLICATE_DAY

    def test_day_out_of_range(self, build):
        assert _rule_of(build(days=[1, 3, 7])) == PlanRule.DAY_OUT_OF_RANGE

    def test_session_without_exercises(self, plan_payload):
        payload = plan_payload(uuid.uuid4())
        payload["weeklyPlan"][1]["exercises"] = []

        assert _rule_of(PlanCreate.model_validate(payload)) == PlanRule.INVALID_EXERCISE

    def test_too_many_exercises(self, plan_payload):
        payload = plan_payload(uuid.uuid4())
        payload["weeklyPlan"][0]["exercises"] = [
            {"name": f"Move {i}", "sets": 2, "reps": "10", "order": i} for i in range(11)
        ]

        assert _rule_of(PlanCreate.model_validate(payload)) == PlanRule.INVALID_EXERCISE

    @pytest.mark.parametrize(
        "exercise",
        [
            {"name": "", "sets": 3, "reps": "10", "order": 1},
            {"name": "Squat", "sets": 0, "reps": "10", "order": 1},
            {"name": "Squat", "sets": 3, "reps": "  ", "order": 1},
            {"name": "Squat", "sets": 3, "reps": "10"},
        ],
    )
    def test_incomplete_exercise(self, plan_payload, exercise):
        payload = plan_payload(uuid.uuid4())
        payload["weeklyPlan"][2]["exercises"] = [exercise]

        assert _rule_of(PlanCreate.model_validate(payload)) == PlanRule.INVALID_EXERCISE

    def test_same_start_and_end(self, build):
        day = date(2025, 1, 10)
        assert _rule_of(build(start=day, end=day)) == PlanRule.DATE_ORDER_INVALID

    def test_duration_too_short(self, build):
        plan = build(start=date(2025, 1, 1), end=date(2025, 1, 5))
        assert _rule_of(plan) == PlanRule.DURATION_TOO_SHORT

    def test_duration_too_long(self, build):
        plan = build(start=date(2025, 1, 1), end=date(2026, 1, 3))
        assert _rule_of(plan) == PlanRule.DURATION_TOO_LONG


class TestRuleOrder:
    """Only the first violated rule is reported."""

    def test_frequency_checked_before_dates(self, build):
        plan = build(days=[1, 2], frequency=6, start=date(2025, 1, 10), end=date(2025, 1, 10))
        assert _rule_of(plan) == PlanRule.INVALID_FREQUENCY

    def test_duplicate_reported_before_out_of_range(self, build):
        assert _rule_of(build(days=[9, 9, 1])) == PlanRule.DUPLICATE_DAY

    def test_exercises_checked_before_dates(self, plan_payload):
        payload = plan_payload(uuid.uuid4(), start=date(2025, 1, 1), end=date(2025, 1, 2))
        payload["weeklyPlan"][0]["exercises"] = []

        assert _rule_of(PlanCreate.model_validate(payload)) == PlanRule.INVALID_EXERCISE


class TestValidateDates:

    def test_exactly_seven_days_is_allowed(self):
        validate_dates(date(2025, 1, 1), date(2025, 1, 8))

    def test_exactly_one_year_is_allowed(self):
        validate_dates(date(2025, 1, 1), date(2026, 1, 1))

    def test_error_carries_rule_in_dict(self):
        with pytest.raises(PlanValidationError) as exc_info:
            validate_dates(date(2025, 2, 1), date(2025, 1, 1))

        body = exc_info.value.to_dict()
        assert body["rule"] == "DateOrderInvalid"
        assert body["code"] == "plan_validation_error"
