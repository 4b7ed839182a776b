from datetime import date
from typing import Iterable, Optional

from app.analytics.frequency import is_due, visible_habits
from app.analytics.goals import dynamic_goal, percent
from app.dates import DayLike, format_day, month_end, month_start, parse_day
from app.schemas import CategoryMetrics, Habit, HabitLog, MonthlyProgress


def _month_bounds(month: DayLike) -> tuple[str, str]:
    first = month_start(parse_day(month))
    return format_day(first), format_day(month_end(first))


def completed_in_month(habit: Habit, logs: Iterable[HabitLog], month: DayLike) -> int:
    first, last = _month_bounds(month)
    return sum(1 for log in logs if log.habit_id == habit.id and first <= log.date <= last)


def monthly_progress(habit: Habit, logs: Iterable[HabitLog], month: DayLike) -> MonthlyProgress:
    completed = completed_in_month(habit, logs, month)
    goal = dynamic_goal(habit, month)
    return MonthlyProgress(habit_id=habit.id, completed=completed, goal=goal, percentage=percent(completed, goal))


def category_breakdown(habits: Iterable[Habit], logs: Iterable[HabitLog], month: DayLike) -> list[CategoryMetrics]:
    logs = list(logs)
    totals: dict[str, list[int]] = {}
    for habit in habits:
        entry = totals.setdefault(habit.category, [0, 0])
        entry[0] += dynamic_goal(habit, month)
        entry[1] += completed_in_month(habit, logs, month)

    return [
        CategoryMetrics(
            category=category,
            goal=goal,
            progress=progress,
            remaining=max(0, goal - progress),
            percentage=percent(progress, goal),
        )
        for category, (goal, progress) in totals.items()
    ]


def is_day_complete(habit: Habit, log: Optional[HabitLog]) -> bool:
    """Dashboard notion of "done": quantifiable habits need the target reached.

    Streaks only look at log existence, so a partial quantity keeps a streak
    alive while this still reports the day as incomplete.
    """
    if log is None:
        return False
    if habit.is_quantifiable:
        return (log.value or 0) >= (habit.target_value or 0)
    return True


def daily_completion(habits: Iterable[Habit], logs: Iterable[HabitLog], day: DayLike) -> tuple[int, int]:
    """(completed, scheduled) for habits visible and due on ``day``."""
    target: date = parse_day(day)
    key = format_day(target)
    by_habit = {log.habit_id: log for log in logs if log.date == key}

    scheduled = [h for h in visible_habits(habits, target) if is_due(h, target)]
    completed = sum(1 for h in scheduled if is_day_complete(h, by_habit.get(h.id)))
    return completed, len(scheduled)
