"""Monthly goal proration and pacing.

A habit created or archived inside the viewed month only gets the share of its
``month_goal`` that matches the days it was active, rounded up, never below 1.
"""

from typing import Optional

from app.dates import DayLike, days_in_month, month_end, month_start, parse_day
from app.schemas import GoalPacing, Habit

AHEAD = "ahead"
ON_TRACK = "on_track"
BEHIND = "behind"


def percent(part: int, whole: int) -> int:
    """``round(100 * part / whole)`` with halves rounded up; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return (part * 200 + whole) // (2 * whole)


def active_window(habit: Habit, month: DayLike) -> Optional[tuple[int, int]]:
    """First and last active day-of-month inside ``month``, or None if inactive."""
    first = month_start(parse_day(month))
    last = month_end(first)

    created = habit.created_day
    archived = habit.archived_day
    if created > last:
        return None
    if archived is not None and archived < first:
        return None

    start_day = created.day if created >= first else 1
    end_day = archived.day if archived is not None and archived <= last else last.day
    if end_day < start_day:
        return None
    return start_day, end_day


def dynamic_goal(habit: Habit, month: DayLike) -> int:
    window = active_window(habit, month)
    if window is None or habit.month_goal <= 0:
        return 0

    total_days = days_in_month(parse_day(month))
    start_day, end_day = window
    if start_day == 1 and end_day == total_days:
        return habit.month_goal

    active_days = end_day - start_day + 1
    prorated = (active_days * habit.month_goal + total_days - 1) // total_days
    return max(1, prorated)


def expected_count(habit: Habit, day_of_month: int, month: DayLike) -> int:
    """Completions a linear pace through the active window would have by ``day_of_month``."""
    window = active_window(habit, month)
    goal = dynamic_goal(habit, month)
    if window is None or goal == 0:
        return 0

    start_day, end_day = window
    active_days = end_day - start_day + 1
    elapsed = min(day_of_month, end_day) - start_day + 1
    elapsed = max(0, min(elapsed, active_days))
    return goal * elapsed // active_days


def goal_pacing(habit: Habit, completed_count: int, day_of_month: int, month: DayLike) -> GoalPacing:
    goal = dynamic_goal(habit, month)
    expected = expected_count(habit, day_of_month, month)

    def _result(status: str, message: str) -> GoalPacing:
        return GoalPacing(status=status, message=message, goal=goal, expected=expected, completed=completed_count)

    if goal == 0:
        return _result(ON_TRACK, "No goal this month")
    if completed_count >= goal:
        return _result(AHEAD, "Goal Met")
    if completed_count >= expected + 2:
        return _result(AHEAD, "Ahead of pace")
    if completed_count >= expected:
        return _result(ON_TRACK, "On track")
    if expected - completed_count > 5:
        return _result(BEHIND, "Far behind")
    return _result(BEHIND, "Slightly behind")
