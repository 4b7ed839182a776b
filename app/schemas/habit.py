from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from app.dates import WEEKDAY_SHORT, civil_datetime, format_day, parse_day

FREQUENCY_KINDS = ("daily", "weekdays", "weekends", "weekly", "custom")


class Frequency(BaseModel):
    kind: str = "daily"
    times_per_week: Optional[int] = None
    custom_days: list[int] = Field(default_factory=list)

    class Config:
        frozen = True

    @field_validator("custom_days", mode="before")
    @classmethod
    def _normalize_days(cls, value: Any) -> list[int]:
        if not value:
            return []
        return sorted({int(x) for x in value})

    def label(self) -> str:
        if self.kind == "weekdays":
            return "Weekdays"
        if self.kind == "weekends":
            return "Weekends"
        if self.kind == "weekly":
            return f"{self.times_per_week or 1}x per week"
        if self.kind == "custom":
            names = [WEEKDAY_SHORT[d] for d in self.custom_days if 0 <= d <= 6]
            return ", ".join(names) or "Custom"
        return "Every day"


class Habit(BaseModel):
    """In-memory habit record.

    Frozen so a snapshot handed to a reader can never change underneath it;
    the coordinator replaces records with ``model_copy(update=...)``.
    """

    id: str
    user_id: str
    name: str
    category: str = "Other"
    month_goal: int = 0
    priority: int = 0
    type: str = "daily"
    frequency: Optional[Frequency] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None
    skip_dates: tuple[str, ...] = ()
    target_value: Optional[float] = None
    unit: Optional[str] = None

    class Config:
        from_attributes = True
        frozen = True

    @field_validator("created_at", "updated_at", "archived_at")
    @classmethod
    def _civil_datetimes(cls, value: Optional[datetime]) -> Optional[datetime]:
        return civil_datetime(value)

    @field_validator("skip_dates", mode="before")
    @classmethod
    def _normalize_skip_dates(cls, value: Any) -> tuple[str, ...]:
        if not value:
            return ()
        return tuple(sorted({format_day(x) for x in value}))

    @property
    def is_quantifiable(self) -> bool:
        return self.target_value is not None

    @property
    def streak_cadence(self) -> str:
        if self.type == "weekly" or (self.frequency is not None and self.frequency.kind == "weekly"):
            return "weekly"
        return "daily"

    @property
    def created_day(self) -> date:
        return self.created_at.date()

    @property
    def archived_day(self) -> Optional[date]:
        return self.archived_at.date() if self.archived_at else None


class HabitCreateIn(BaseModel):
    user_id: Optional[str] = None
    name: str
    category: str = "Other"
    month_goal: int = 0
    priority: Optional[int] = None
    type: str = "daily"
    frequency: Optional[Frequency] = None
    created_at: Optional[datetime] = None
    target_value: Optional[float] = None
    unit: Optional[str] = None

    @field_validator("created_at")
    @classmethod
    def _civil_created(cls, value: Optional[datetime]) -> Optional[datetime]:
        return civil_datetime(value)


class HabitUpdateIn(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    month_goal: Optional[int] = None
    priority: Optional[int] = None
    type: Optional[str] = None
    frequency: Optional[Frequency] = None
    archived_at: Optional[datetime] = None
    target_value: Optional[float] = None
    unit: Optional[str] = None

    @field_validator("archived_at")
    @classmethod
    def _civil_archived(cls, value: Optional[datetime]) -> Optional[datetime]:
        return civil_datetime(value)


class HabitOut(BaseModel):
    id: str
    name: str
    category: str
    month_goal: int
    priority: int
    frequency_label: str
    created_at: datetime
    archived_at: Optional[datetime] = None
    skip_dates: list[str]
    target_value: Optional[float] = None
    unit: Optional[str] = None

    @classmethod
    def from_record(cls, habit: Habit) -> "HabitOut":
        return cls(
            id=habit.id,
            name=habit.name,
            category=habit.category,
            month_goal=habit.month_goal,
            priority=habit.priority,
            frequency_label=(habit.frequency or Frequency()).label(),
            created_at=habit.created_at,
            archived_at=habit.archived_at,
            skip_dates=list(habit.skip_dates),
            target_value=habit.target_value,
            unit=habit.unit,
        )


class SkipDayIn(BaseModel):
    date: str

    @field_validator("date")
    @classmethod
    def _civil(cls, value: str) -> str:
        return parse_day(value).isoformat()
