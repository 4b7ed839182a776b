from app.analytics.badges import MILESTONES, badges
from app.analytics.frequency import (
    is_due,
    is_off_day,
    scheduled_days_in_month,
    scheduled_days_in_range,
    scheduled_days_in_week,
    visible_habits,
)
from app.analytics.goals import active_window, dynamic_goal, expected_count, goal_pacing
from app.analytics.progress import category_breakdown, daily_completion, is_day_complete, monthly_progress
from app.analytics.streaks import best_streak, longest_streak, streak

__all__ = [
    "is_due",
    "is_off_day",
    "scheduled_days_in_range",
    "scheduled_days_in_month",
    "scheduled_days_in_week",
    "visible_habits",
    "streak",
    "longest_streak",
    "best_streak",
    "active_window",
    "dynamic_goal",
    "expected_count",
    "goal_pacing",
    "monthly_progress",
    "category_breakdown",
    "is_day_complete",
    "daily_completion",
    "badges",
    "MILESTONES",
]
