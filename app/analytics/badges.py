from datetime import date
from typing import Iterable, Optional

from app.analytics.goals import percent
from app.analytics.streaks import streak
from app.dates import SUNDAY
from app.schemas import Badge, Habit, HabitLog

STREAK = "streak"
HABITS = "habits"
COMPLETIONS = "completions"

# (id, name, description, aggregate, threshold); order is the display order.
MILESTONES = [
    ("week_warrior", "Week Warrior", "Keep a 7 day streak", STREAK, 7),
    ("monthly_master", "Monthly Master", "Keep a 30 day streak", STREAK, 30),
    ("century_club", "Century Club", "Keep a 100 day streak", STREAK, 100),
    ("first_step", "First Step", "Create your first habit", HABITS, 1),
    ("dedicated", "Dedicated", "Log 50 completions", COMPLETIONS, 50),
    ("habit_builder", "Habit Builder", "Track 5 habits", HABITS, 5),
]


def badges(
    habits: Iterable[Habit],
    logs: Iterable[HabitLog],
    today: Optional[date] = None,
    first_weekday: int = SUNDAY,
) -> list[Badge]:
    habits = list(habits)
    logs = list(logs)
    aggregates = {
        STREAK: max((streak(h, logs, today, first_weekday) for h in habits), default=0),
        HABITS: len(habits),
        COMPLETIONS: len(logs),
    }

    result: list[Badge] = []
    for badge_id, name, description, aggregate, threshold in MILESTONES:
        value = aggregates[aggregate]
        result.append(
            Badge(
                id=badge_id,
                name=name,
                description=description,
                earned=value >= threshold,
                progress=min(100, percent(value, threshold)),
            )
        )
    return result
