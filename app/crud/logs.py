from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.dates import parse_day
from app.models import HabitLog

LOG_FIELDS = {"id", "user_id", "habit_id", "date", "value", "notes"}


def _columns(row: dict[str, Any]) -> dict[str, Any]:
    values = {k: v for k, v in row.items() if k in LOG_FIELDS}
    if "date" in values:
        values["date"] = parse_day(values["date"])
    return values


def list_logs(
    db: Session,
    user_id: str,
    habit_id: Optional[str] = None,
    date: Optional[str] = None,
) -> list[HabitLog]:
    query = select(HabitLog).where(HabitLog.user_id == user_id)
    if habit_id is not None:
        query = query.where(HabitLog.habit_id == habit_id)
    if date is not None:
        query = query.where(HabitLog.date == parse_day(date))
    return list(db.scalars(query.order_by(HabitLog.date.asc())))


def insert_log(db: Session, row: dict[str, Any]) -> HabitLog:
    log = HabitLog(**_columns(row))
    db.add(log)
    db.commit()
    db.refresh(log)
    return log


def update_log(db: Session, log_id: str, partial: dict[str, Any]) -> bool:
    log = db.get(HabitLog, log_id)
    if log is None:
        return False
    values = _columns(partial)
    values.pop("id", None)
    for key, value in values.items():
        setattr(log, key, value)
    db.add(log)
    db.commit()
    return True


def delete_log(db: Session, log_id: str) -> bool:
    log = db.get(HabitLog, log_id)
    if log is None:
        return False
    db.delete(log)
    db.commit()
    return True
