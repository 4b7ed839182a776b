"""Civil-date helpers shared by the analytics modules.

Dates that cross the core boundary are ``yyyy-MM-dd`` strings. Weekday indices
follow the 0=Sunday .. 6=Saturday convention used by stored custom schedules.
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Union

from app.errors import HabitValidationError

ISO_DATE = "%Y-%m-%d"
WEEKDAY_SHORT = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
SUNDAY = 0
MONDAY = 1

DayLike = Union[str, date, datetime]


def parse_day(value: DayLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), ISO_DATE).date()
    except ValueError as exc:
        raise HabitValidationError(f"invalid date {value!r}, expected yyyy-MM-dd") from exc


def format_day(value: DayLike) -> str:
    return parse_day(value).strftime(ISO_DATE)


def weekday_index(day: date) -> int:
    return (day.weekday() + 1) % 7


def month_start(day: date) -> date:
    return day.replace(day=1)


def days_in_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


def month_end(day: date) -> date:
    return day.replace(day=days_in_month(day))


def parse_month(value: Union[str, date]) -> date:
    """Accept ``yyyy-MM`` or any date inside the month; returns the 1st."""
    if isinstance(value, date):
        return month_start(value)
    raw = str(value).strip()
    try:
        return datetime.strptime(raw[:7], "%Y-%m").date()
    except ValueError as exc:
        raise HabitValidationError(f"invalid month {value!r}, expected yyyy-MM") from exc


def week_start(day: date, first_weekday: int = SUNDAY) -> date:
    offset = (weekday_index(day) - first_weekday) % 7
    return day - timedelta(days=offset)


def iter_days(start: date, end: date) -> Iterator[date]:
    cursor = start
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)


def civil_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """Drop tzinfo, keeping the wall-clock reading the caller supplied."""
    if value is None or value.tzinfo is None:
        return value
    return value.replace(tzinfo=None)
