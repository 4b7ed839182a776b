from app.schemas.analytics import Badge, CategoryMetrics, DueOut, GoalPacing, MonthlyProgress, StreakOut
from app.schemas.habit import Frequency, Habit, HabitCreateIn, HabitOut, HabitUpdateIn, SkipDayIn
from app.schemas.log import HabitLog, LogToggleIn, LogValueIn

__all__ = [
    "Frequency",
    "Habit",
    "HabitCreateIn",
    "HabitUpdateIn",
    "HabitOut",
    "SkipDayIn",
    "HabitLog",
    "LogToggleIn",
    "LogValueIn",
    "Badge",
    "GoalPacing",
    "MonthlyProgress",
    "CategoryMetrics",
    "StreakOut",
    "DueOut",
]
