from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import Habit, HabitLog

HABIT_FIELDS = {
    "id",
    "user_id",
    "name",
    "category",
    "month_goal",
    "priority",
    "type",
    "frequency",
    "skip_dates",
    "target_value",
    "unit",
    "created_at",
    "updated_at",
    "archived_at",
}


def _columns(row: dict[str, Any]) -> dict[str, Any]:
    values = {k: v for k, v in row.items() if k in HABIT_FIELDS}
    if "skip_dates" in values:
        values["skip_dates"] = list(values["skip_dates"] or [])
    return values


def list_habits(db: Session, user_id: str, habit_id: Optional[str] = None) -> list[Habit]:
    """Owner's habits by priority, newest first among equal priorities."""
    query = select(Habit).where(Habit.user_id == user_id)
    if habit_id is not None:
        query = query.where(Habit.id == habit_id)
    return list(db.scalars(query.order_by(Habit.priority.asc(), Habit.created_at.desc())))


def insert_habit(db: Session, row: dict[str, Any]) -> Habit:
    values = _columns(row)
    if values.get("created_at") is None:
        values.pop("created_at", None)
    habit = Habit(**values)
    db.add(habit)
    db.commit()
    db.refresh(habit)
    return habit


def update_habit(db: Session, habit_id: str, partial: dict[str, Any]) -> bool:
    values = _columns(partial)
    values.pop("id", None)
    habit = db.get(Habit, habit_id)
    if habit is None:
        return False
    for key, value in values.items():
        setattr(habit, key, value)
    db.add(habit)
    db.commit()
    return True


def delete_habit(db: Session, habit_id: str) -> bool:
    habit = db.get(Habit, habit_id)
    if habit is None:
        return False
    # remove logs through the ORM so each one reaches the change feed
    for log in list(db.scalars(select(HabitLog).where(HabitLog.habit_id == habit_id))):
        db.delete(log)
    db.delete(habit)
    db.commit()
    return True

