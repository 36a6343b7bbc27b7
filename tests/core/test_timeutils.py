"""Tests for calendar-day helpers."""
from datetime import date, datetime, timedelta, timezone

from src.core.timeutils import local_today, local_yesterday, month_bounds, to_local_date
from src.domains.workouts.models import day_of_week_for


def test_month_bounds_regular_month():
    assert month_bounds(2025, 4) == (date(2025, 4, 1), date(2025, 4, 30))


def test_month_bounds_december():
    assert month_bounds(2024, 12) == (date(2024, 12, 1), date(2024, 12, 31))


def test_month_bounds_leap_february():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))


def test_yesterday_is_one_day_before_today():
    assert local_today("UTC") - local_yesterday("UTC") == timedelta(days=1)


def test_day_of_week_starts_on_sunday():
    assert day_of_week_for(date(2025, 3, 2)) == 0  # Sunday
    assert day_of_week_for(date(2025, 3, 3)) == 1  # Monday
    assert day_of_week_for(date(2025, 3, 8)) == 6  # Saturday


def test_to_local_date_converts_aware_timestamps():
    late_utc = datetime(2025, 1, 6, 1, 30, tzinfo=timezone.utc)

    assert to_local_date(late_utc, "UTC") == date(2025, 1, 6)
    assert to_local_date(late_utc, "America/Sao_Paulo") == date(2025, 1, 5)


def test_to_local_date_keeps_naive_day():
    assert to_local_date(datetime(2025, 1, 6, 23, 59)) == date(2025, 1, 6)
