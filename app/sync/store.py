"""The remote persistence collaborator the coordinator talks to.

``RemoteStore`` is the owner-scoped contract (list / insert / update / delete
plus a change feed). ``SqlRemoteStore`` fulfils it with the SQLAlchemy crud
helpers, running each blocking call on a worker thread.
"""

import asyncio
from typing import Any, Callable, List, Optional, Protocol

from pydantic import BaseModel
from sqlalchemy.orm import Session

from app import crud
from app.db import SessionLocal
from app.schemas import Habit, HabitLog
from app.sync.feed import ChangeFeed, ChangeSubscription, change_feed, install_orm_listeners

HABITS = "habits"
HABIT_LOGS = "habit_logs"
TABLES = (HABITS, HABIT_LOGS)


class RemoteStore(Protocol):
    async def list(self, table: str, user_id: str, **filters: Any) -> List[Any]: ...

    async def insert(self, table: str, row: dict[str, Any]) -> Any: ...

    async def update(self, table: str, row_id: str, partial: dict[str, Any]) -> bool: ...

    async def delete(self, table: str, row_id: str) -> bool: ...

    def subscribe(self, user_id: str) -> ChangeSubscription: ...


def to_row(values: dict[str, Any]) -> dict[str, Any]:
    row: dict[str, Any] = {}
    for key, value in values.items():
        if isinstance(value, BaseModel):
            value = value.model_dump()
        elif isinstance(value, tuple):
            value = list(value)
        row[key] = value
    return row


def _check_table(table: str) -> None:
    if table not in TABLES:
        raise ValueError(f"unknown table {table!r}")


class SqlRemoteStore:
    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        feed: Optional[ChangeFeed] = None,
    ) -> None:
        self._session_factory = session_factory
        self._feed = feed or change_feed
        install_orm_listeners(self._feed)

    async def list(self, table: str, user_id: str, **filters: Any) -> List[Any]:
        _check_table(table)
        return await asyncio.to_thread(self._list, table, user_id, filters)

    async def insert(self, table: str, row: dict[str, Any]) -> Any:
        _check_table(table)
        return await asyncio.to_thread(self._insert, table, to_row(row))

    async def update(self, table: str, row_id: str, partial: dict[str, Any]) -> bool:
        _check_table(table)
        return await asyncio.to_thread(self._update, table, row_id, to_row(partial))

    async def delete(self, table: str, row_id: str) -> bool:
        _check_table(table)
        return await asyncio.to_thread(self._delete, table, row_id)

    def subscribe(self, user_id: str) -> ChangeSubscription:
        return self._feed.subscribe(user_id)

    def _list(self, table: str, user_id: str, filters: dict[str, Any]) -> List[Any]:
        with self._session_factory() as db:
            if table == HABITS:
                rows = crud.list_habits(db, user_id, habit_id=filters.get("id"))
                return [Habit.model_validate(row) for row in rows]
            rows = crud.list_logs(db, user_id, habit_id=filters.get("habit_id"), date=filters.get("date"))
            return [HabitLog.model_validate(row) for row in rows]

    def _insert(self, table: str, row: dict[str, Any]) -> Any:
        with self._session_factory() as db:
            if table == HABITS:
                return Habit.model_validate(crud.insert_habit(db, row))
            return HabitLog.model_validate(crud.insert_log(db, row))

    def _update(self, table: str, row_id: str, partial: dict[str, Any]) -> bool:
        with self._session_factory() as db:
            if table == HABITS:
                ok = crud.update_habit(db, row_id, partial)
            else:
                ok = crud.update_log(db, row_id, partial)
        if not ok:
            raise LookupError(f"{table} row {row_id} not found")
        return ok

    def _delete(self, table: str, row_id: str) -> bool:
        with self._session_factory() as db:
            if table == HABITS:
                return crud.delete_habit(db, row_id)
            return crud.delete_log(db, row_id)
