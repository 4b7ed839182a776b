"""Current and historic streaks.

A daily habit's day is satisfied by a log row or a skip date. If today is not
yet satisfied the walk may start from yesterday (one grace day). A weekly
habit's week is satisfied by any log row inside it, and the still-open current
week never breaks the run on its own.
"""

from datetime import date, timedelta
from typing import Iterable, Optional

from app.dates import SUNDAY, parse_day, week_start
from app.schemas import Habit, HabitLog

ONE_DAY = timedelta(days=1)
ONE_WEEK = timedelta(days=7)


def _logged_days(habit: Habit, logs: Iterable[HabitLog]) -> set[date]:
    return {log.day for log in logs if log.habit_id == habit.id}


def _satisfied_days(habit: Habit, logs: Iterable[HabitLog]) -> set[date]:
    return _logged_days(habit, logs) | {parse_day(d) for d in habit.skip_dates}


def streak(habit: Habit, logs: Iterable[HabitLog], today: Optional[date] = None, first_weekday: int = SUNDAY) -> int:
    today = today or date.today()
    if habit.streak_cadence == "weekly":
        return _weekly_streak(_logged_days(habit, logs), today, first_weekday)
    return _daily_streak(_satisfied_days(habit, logs), today)


def _daily_streak(satisfied: set[date], today: date) -> int:
    cursor = today
    if cursor not in satisfied:
        cursor -= ONE_DAY
        if cursor not in satisfied:
            return 0

    count = 0
    while cursor in satisfied:
        count += 1
        cursor -= ONE_DAY
    return count


def _weekly_streak(logged: set[date], today: date, first_weekday: int) -> int:
    weeks = {week_start(d, first_weekday) for d in logged}
    cursor = week_start(today, first_weekday)

    count = 0
    if cursor in weeks:
        count += 1
    cursor -= ONE_WEEK
    while cursor in weeks:
        count += 1
        cursor -= ONE_WEEK
    return count


def _longest_run(points: set[date], step: timedelta) -> int:
    longest = 0
    run = 0
    previous: Optional[date] = None
    for point in sorted(points):
        if previous is not None and point - previous == step:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = point
    return longest


def longest_streak(habit: Habit, logs: Iterable[HabitLog], first_weekday: int = SUNDAY) -> int:
    if habit.streak_cadence == "weekly":
        weeks = {week_start(d, first_weekday) for d in _logged_days(habit, logs)}
        return _longest_run(weeks, ONE_WEEK)
    return _longest_run(_satisfied_days(habit, logs), ONE_DAY)


def best_streak(habits: Iterable[Habit], logs: Iterable[HabitLog], first_weekday: int = SUNDAY) -> Optional[tuple[Habit, int]]:
    """The habit with the longest historic run, or None when nothing was ever logged."""
    logs = list(logs)
    best: Optional[tuple[Habit, int]] = None
    for habit in habits:
        value = longest_streak(habit, logs, first_weekday)
        if value > 0 and (best is None or value > best[1]):
            best = (habit, value)
    return best
