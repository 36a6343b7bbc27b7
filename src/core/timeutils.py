"""Calendar-day helpers.

All "today"/"yesterday" decisions and day-of-week arithmetic use
COMPLIANCE_TIMEZONE.
"""
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from src.config.settings import settings


def local_now(tz_name: str | None = None) -> datetime:
    return datetime.now(ZoneInfo(tz_name or settings.COMPLIANCE_TIMEZONE))


def local_today(tz_name: str | None = None) -> date:
    return local_now(tz_name).date()


def local_yesterday(tz_name: str | None = None) -> date:
    return local_today(tz_name) - timedelta(days=1)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    first = date(year, month, 1)
    if month == 12:
        next_first = date(year + 1, 1, 1)
    else:
        next_first = date(year, month + 1, 1)
    return first, next_first - timedelta(days=1)


def to_local_date(value: datetime, tz_name: str | None = None) -> date:
    """Calendar day of a timestamp; naive timestamps are taken as already local."""
    if value.tzinfo is None:
        return value.date()
    return value.astimezone(ZoneInfo(tz_name or settings.COMPLIANCE_TIMEZONE)).date()
