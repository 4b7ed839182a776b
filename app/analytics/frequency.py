from datetime import date, timedelta
from typing import Iterable, Optional

from app.dates import SUNDAY, DayLike, iter_days, month_end, month_start, parse_day, week_start, weekday_index
from app.schemas import Frequency, Habit

WEEKDAYS = {1, 2, 3, 4, 5}
WEEKENDS = {0, 6}


def habit_frequency(habit: Habit) -> Frequency:
    return habit.frequency or Frequency()


def is_due(habit: Habit, day: DayLike) -> bool:
    """Whether ``habit`` is scheduled on ``day``.

    Archive state is not consulted; hiding archived habits is up to the caller
    (see ``visible_habits``). ``weekly`` habits are due every day because the
    quota is only meaningful per week.
    """
    target = parse_day(day)
    if target < habit.created_day:
        return False

    frequency = habit_frequency(habit)
    weekday = weekday_index(target)
    if frequency.kind == "weekdays":
        return weekday in WEEKDAYS
    if frequency.kind == "weekends":
        return weekday in WEEKENDS
    if frequency.kind == "custom":
        return weekday in frequency.custom_days
    return True


def is_off_day(habit: Habit, day: DayLike) -> bool:
    return not is_due(habit, day)


def scheduled_days_in_range(habit: Habit, start: DayLike, end: DayLike) -> list[date]:
    first = max(parse_day(start), habit.created_day)
    last = parse_day(end)
    if first > last:
        return []
    return [d for d in iter_days(first, last) if is_due(habit, d)]


def scheduled_days_in_month(habit: Habit, month: DayLike, today: Optional[date] = None) -> int:
    """Scheduled days in the month; the current month only counts up to today."""
    first = month_start(parse_day(month))
    last = month_end(first)
    today = today or date.today()
    if month_start(today) == first and today < last:
        last = today
    return len(scheduled_days_in_range(habit, first, last))


def scheduled_days_in_week(habit: Habit, day: DayLike, first_weekday: int = SUNDAY) -> int:
    start = week_start(parse_day(day), first_weekday)
    return len(scheduled_days_in_range(habit, start, start + timedelta(days=6)))


def visible_habits(habits: Iterable[Habit], day: DayLike) -> list[Habit]:
    """Habits that exist on ``day``: created on or before it, not archived before it."""
    target = parse_day(day)
    result: list[Habit] = []
    for habit in habits:
        if target < habit.created_day:
            continue
        if habit.archived_day is not None and habit.archived_day < target:
            continue
        result.append(habit)
    return result
