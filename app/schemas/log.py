from datetime import date as date_type
from typing import Any, Optional

from pydantic import BaseModel, field_validator

from app.dates import format_day, parse_day


class HabitLog(BaseModel):
    """One row per (habit, civil date). Existence means the habit was acted on."""

    id: str
    user_id: str
    habit_id: str
    date: str
    value: Optional[float] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True
        frozen = True

    @field_validator("date", mode="before")
    @classmethod
    def _civil_date(cls, value: Any) -> str:
        return format_day(value)

    @property
    def day(self) -> date_type:
        return parse_day(self.date)


class LogToggleIn(BaseModel):
    habit_id: str
    date: str


class LogValueIn(BaseModel):
    habit_id: str
    date: str
    value: float
