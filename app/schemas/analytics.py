from typing import Optional

from pydantic import BaseModel


class Badge(BaseModel):
    id: str
    name: str
    description: str
    earned: bool
    progress: int


class GoalPacing(BaseModel):
    status: str
    message: str
    goal: int
    expected: int
    completed: int


class MonthlyProgress(BaseModel):
    habit_id: str
    completed: int
    goal: int
    percentage: int


class CategoryMetrics(BaseModel):
    category: str
    goal: int
    progress: int
    remaining: int
    percentage: int


class StreakOut(BaseModel):
    habit_id: str
    name: str
    cadence: str
    current: int
    longest: int


class DueOut(BaseModel):
    habit_id: str
    name: str
    due: bool
    completed: bool
    value: Optional[float] = None
