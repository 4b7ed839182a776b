from app.models.base import Base
from app.models.habit import Habit
from app.models.habit_log import HabitLog

__all__ = [
    "Base",
    "Habit",
    "HabitLog",
]
