"""Single writer for an owner's habits and logs.

Every mutation follows the same path: validate, apply the change locally
(OPTIMISTIC), perform the remote write, then either swap in the server's rows
(CONFIRMED) or restore the pre-mutation snapshot and reload everything from the
store (REVERTED) before re-raising. While any mutation is in flight, remote
change notifications are parked and replayed once the last one finishes.
"""

import asyncio
import itertools
import logging
import threading
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, AsyncIterator, Iterable, Optional, Union

from pydantic import BaseModel, ValidationError

from app.config import settings
from app.dates import DayLike, format_day
from app.errors import HabitNotFoundError, HabitValidationError, RemoteWriteError
from app.schemas import Frequency, Habit, HabitCreateIn, HabitLog, HabitUpdateIn
from app.schemas.habit import FREQUENCY_KINDS
from app.sync.feed import ChangeEvent, ChangeSubscription
from app.sync.store import HABIT_LOGS, HABITS, RemoteStore

logger = logging.getLogger(__name__)

HABIT_TYPES = ("daily", "weekly")
RETRY_EVENT = "RETRY"


class SyncState(str, Enum):
    IDLE = "idle"
    OPTIMISTIC = "optimistic"
    CONFIRMED = "confirmed"
    REVERTED = "reverted"


@dataclass(frozen=True)
class Snapshot:
    habits: tuple[Habit, ...] = ()
    logs: tuple[HabitLog, ...] = ()


def _as_dict(values: Union[BaseModel, dict[str, Any]]) -> dict[str, Any]:
    if isinstance(values, BaseModel):
        return values.model_dump(exclude_unset=True)
    return dict(values)


def _validate_habit_fields(values: dict[str, Any]) -> None:
    if "name" in values and not str(values["name"] or "").strip():
        raise HabitValidationError("name is required")
    if "month_goal" in values and (values["month_goal"] is None or int(values["month_goal"]) < 0):
        raise HabitValidationError("month_goal must be >= 0")
    if "type" in values and values["type"] not in HABIT_TYPES:
        raise HabitValidationError(f"type must be one of {', '.join(HABIT_TYPES)}")
    if values.get("target_value") is not None and float(values["target_value"]) <= 0:
        raise HabitValidationError("target_value must be positive")

    frequency = values.get("frequency")
    if frequency is None:
        return
    if isinstance(frequency, dict):
        try:
            frequency = Frequency.model_validate(frequency)
        except ValidationError as exc:
            raise HabitValidationError(f"invalid frequency: {exc}") from exc
    if frequency.kind not in FREQUENCY_KINDS:
        raise HabitValidationError(f"unknown frequency {frequency.kind!r}")
    if frequency.kind == "custom" and any(d < 0 or d > 6 for d in frequency.custom_days):
        raise HabitValidationError("custom days must be weekday indices 0..6")
    if frequency.kind == "weekly" and frequency.times_per_week is not None and not 1 <= frequency.times_per_week <= 7:
        raise HabitValidationError("times_per_week must be between 1 and 7")


def _build_habit(values: dict[str, Any]) -> Habit:
    try:
        habit = Habit.model_validate(values)
    except ValidationError as exc:
        raise HabitValidationError(str(exc)) from exc
    if habit.archived_at is not None and habit.archived_at < habit.created_at:
        raise HabitValidationError("archived_at cannot precede created_at")
    return habit


class SyncCoordinator:
    def __init__(
        self,
        store: RemoteStore,
        user_id: str,
        debounce_ms: Optional[int] = None,
    ) -> None:
        self.store = store
        self.user_id = user_id
        self.debounce = (settings.SYNC_DEBOUNCE_MS if debounce_ms is None else debounce_ms) / 1000.0

        self._lock = threading.Lock()
        self._snapshot = Snapshot()
        self._state = SyncState.IDLE
        self._last_outcome: Optional[SyncState] = None
        self._in_flight = 0
        # bumped by every mutation so a reload that overlapped one can be detected
        self._generation = 0
        self._reconcile_pending = False
        self._temp_ids = itertools.count(1)

        self._subscription: Optional[ChangeSubscription] = None
        self._feed_task: Optional[asyncio.Task] = None
        self._retry_task: Optional[asyncio.Future] = None

    def snapshot(self) -> Snapshot:
        with self._lock:
            return self._snapshot

    @property
    def habits(self) -> tuple[Habit, ...]:
        return self.snapshot().habits

    @property
    def logs(self) -> tuple[HabitLog, ...]:
        return self.snapshot().logs

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def last_outcome(self) -> Optional[SyncState]:
        return self._last_outcome

    @property
    def in_flight(self) -> bool:
        return self._in_flight > 0

    def get_habit(self, habit_id: str) -> Optional[Habit]:
        return next((h for h in self.habits if h.id == habit_id), None)

    def log_for(self, habit_id: str, day: DayLike) -> Optional[HabitLog]:
        key = format_day(day)
        return next((log for log in self.logs if log.habit_id == habit_id and log.date == key), None)

    def logs_for_date(self, day: DayLike) -> list[HabitLog]:
        key = format_day(day)
        return [log for log in self.logs if log.date == key]

    def _replace(self, habits: Optional[Iterable[Habit]] = None, logs: Optional[Iterable[HabitLog]] = None) -> None:
        with self._lock:
            self._snapshot = Snapshot(
                habits=tuple(habits) if habits is not None else self._snapshot.habits,
                logs=tuple(logs) if logs is not None else self._snapshot.logs,
            )

    def _put_habit(self, habit: Habit, replacing: Optional[str] = None) -> None:
        target = replacing or habit.id
        habits = list(self.habits)
        for index, existing in enumerate(habits):
            if existing.id == target:
                habits[index] = habit
                break
        else:
            habits.append(habit)
        self._replace(habits=habits)

    def _put_log(self, log: Optional[HabitLog], habit_id: str, day: str) -> None:
        logs = [item for item in self.logs if not (item.habit_id == habit_id and item.date == day)]
        if log is not None:
            logs.append(log)
        self._replace(logs=logs)

    def _temp_id(self) -> str:
        return f"temp-{next(self._temp_ids)}"

    def _require_habit(self, habit_id: str) -> Habit:
        habit = self.get_habit(habit_id)
        if habit is None:
            raise HabitNotFoundError(f"habit {habit_id} not found")
        return habit

    @asynccontextmanager
    async def _mutation(self, operation: str) -> AsyncIterator[None]:
        before = self.snapshot()
        self._in_flight += 1
        self._generation += 1
        self._state = SyncState.OPTIMISTIC
        logger.debug("%s started for user %s", operation, self.user_id)
        try:
            yield
        except Exception as exc:
            self._state = SyncState.REVERTED
            self._last_outcome = SyncState.REVERTED
            logger.warning("%s failed for user %s, reverting", operation, self.user_id, exc_info=True)
            self._replace(habits=before.habits, logs=before.logs)
            await self._reload_after_failure(operation)
            raise RemoteWriteError(operation, exc) from exc
        else:
            self._state = SyncState.CONFIRMED
            self._last_outcome = SyncState.CONFIRMED
        finally:
            self._in_flight -= 1
            if self._in_flight == 0:
                self._state = SyncState.IDLE
                if self._reconcile_pending:
                    self._request_retry()

    async def _reload_after_failure(self, operation: str) -> None:
        try:
            await self.load()
        except Exception:
            logger.error("reload after failed %s did not complete; keeping previous state", operation, exc_info=True)

    async def load(self) -> Snapshot:
        habits, logs = await asyncio.gather(
            self.store.list(HABITS, self.user_id),
            self.store.list(HABIT_LOGS, self.user_id),
        )
        self._replace(habits=habits, logs=logs)
        return self.snapshot()

    async def reconcile(self) -> bool:
        """Reload from the store unless a local mutation is outstanding.

        Returns False when the reload was parked or failed; a parked reload is
        retried once the in-flight count drops back to zero.
        """
        if self._in_flight:
            self._reconcile_pending = True
            logger.debug("reconcile for user %s deferred, mutation in flight", self.user_id)
            return False

        self._reconcile_pending = False
        generation = self._generation
        try:
            habits, logs = await asyncio.gather(
                self.store.list(HABITS, self.user_id),
                self.store.list(HABIT_LOGS, self.user_id),
            )
        except Exception:
            logger.error("reconcile read failed for user %s; keeping current state", self.user_id, exc_info=True)
            return False

        if self._in_flight or self._generation != generation:
            # rows may predate a mutation that ran during the read
            self._reconcile_pending = True
            logger.debug("reconcile for user %s discarded, mutation overlapped the read", self.user_id)
            if not self._in_flight:
                self._request_retry()
            return False
        self._replace(habits=habits, logs=logs)
        return True

    def _request_retry(self) -> None:
        if self._subscription is None:
            self._retry_task = asyncio.ensure_future(self.reconcile())
            return
        self._subscription.queue.put_nowait(ChangeEvent(table="*", event_type=RETRY_EVENT, user_id=self.user_id))

    async def start(self) -> None:
        if self._feed_task is not None:
            return
        self._subscription = self.store.subscribe(self.user_id)
        self._feed_task = asyncio.create_task(self._run_feed())

    async def stop(self) -> None:
        task, self._feed_task = self._feed_task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    async def _run_feed(self) -> None:
        queue = self._subscription.queue
        while True:
            change = await queue.get()
            coalesced = 1 + await self._coalesce(queue)
            logger.debug("change feed for user %s: %s/%s (+%d)", self.user_id, change.table, change.event_type, coalesced - 1)
            await self.reconcile()

    async def _coalesce(self, queue: "asyncio.Queue[ChangeEvent]") -> int:
        """Swallow events until the feed has been quiet for the debounce window."""
        swallowed = 0
        while True:
            try:
                await asyncio.wait_for(queue.get(), timeout=self.debounce)
            except asyncio.TimeoutError:
                return swallowed
            swallowed += 1

    async def add_habit(self, data: Union[HabitCreateIn, dict[str, Any]]) -> Habit:
        values = _as_dict(data)
        values.pop("id", None)
        values["user_id"] = self.user_id
        values.setdefault("created_at", None)
        if values["created_at"] is None:
            values["created_at"] = datetime.now()
        if values.get("priority") is None:
            values["priority"] = len(self.habits) + 1
        values.setdefault("name", "")
        _validate_habit_fields(values)

        temp = _build_habit({**values, "id": self._temp_id()})
        async with self._mutation("add_habit"):
            self._put_habit(temp)
            row = temp.model_dump(exclude={"id", "updated_at"})
            confirmed = await self.store.insert(HABITS, row)
            self._put_habit(confirmed, replacing=temp.id)
            await self._renumber_after("add_habit")
        return self.get_habit(confirmed.id) or confirmed

    async def update_habit(self, habit_id: str, updates: Union[HabitUpdateIn, dict[str, Any]]) -> Habit:
        habit = self._require_habit(habit_id)
        partial = _as_dict(updates)
        partial.pop("id", None)
        partial.pop("user_id", None)
        _validate_habit_fields(partial)
        if "skip_dates" in partial:
            partial["skip_dates"] = [format_day(d) for d in partial["skip_dates"] or []]

        partial["updated_at"] = datetime.now()
        patched = _build_habit({**habit.model_dump(), **partial})

        async with self._mutation("update_habit"):
            self._put_habit(patched)
            await self.store.update(HABITS, habit_id, partial)
            if "priority" in partial or "archived_at" in partial:
                await self._renumber_after("update_habit")
        return self.get_habit(habit_id) or patched

    async def archive_habit(self, habit_id: str, at: Optional[datetime] = None) -> Habit:
        return await self.update_habit(habit_id, {"archived_at": at or datetime.now()})

    async def resume_habit(self, habit_id: str) -> Habit:
        return await self.update_habit(habit_id, {"archived_at": None})

    async def delete_habit(self, habit_id: str) -> None:
        self._require_habit(habit_id)
        async with self._mutation("delete_habit"):
            self._replace(
                habits=[h for h in self.habits if h.id != habit_id],
                logs=[log for log in self.logs if log.habit_id != habit_id],
            )
            await self.store.delete(HABITS, habit_id)
            await self._renumber_after("delete_habit")

    async def toggle_skip_day(self, habit_id: str, day: DayLike) -> bool:
        """Flip ``day`` in the habit's skip list; True when it is now skipped."""
        habit = self._require_habit(habit_id)
        key = format_day(day)
        skipped = set(habit.skip_dates)
        now_skipped = key not in skipped
        if now_skipped:
            skipped.add(key)
        else:
            skipped.discard(key)
        skip_dates = sorted(skipped)

        async with self._mutation("toggle_skip_day"):
            self._put_habit(habit.model_copy(update={"skip_dates": tuple(skip_dates)}))
            await self.store.update(HABITS, habit_id, {"skip_dates": skip_dates})
        return now_skipped

    async def normalize_priorities(self) -> int:
        async with self._mutation("normalize_priorities"):
            changed = await self._normalize_priorities()
        return changed

    async def _renumber_after(self, operation: str) -> None:
        """Renumber once the main write is confirmed; a failure here is logged only,
        since the habit row itself is already stored."""
        try:
            await self._normalize_priorities()
        except Exception:
            logger.error("priority renumbering after %s failed for user %s", operation, self.user_id, exc_info=True)

    async def _normalize_priorities(self) -> int:
        """Renumber priorities to 1..N; ties go to the newest habit.

        Only rows whose priority actually moves are written back.
        """
        rows = await self.store.list(HABITS, self.user_id)
        ordered = sorted(rows, key=lambda h: h.created_at, reverse=True)
        ordered.sort(key=lambda h: h.priority)

        result: list[Habit] = []
        changed = 0
        for index, habit in enumerate(ordered):
            expected = index + 1
            if habit.priority != expected:
                await self.store.update(HABITS, habit.id, {"priority": expected})
                habit = habit.model_copy(update={"priority": expected})
                changed += 1
            result.append(habit)

        if changed:
            logger.info("renumbered %d habit priorities for user %s", changed, self.user_id)
        self._replace(habits=result)
        return changed

    def _temp_log(self, habit_id: str, day: str, value: Optional[float] = None) -> HabitLog:
        return HabitLog(id=self._temp_id(), user_id=self.user_id, habit_id=habit_id, date=day, value=value)

    async def _remote_log(self, habit_id: str, day: str) -> Optional[HabitLog]:
        rows = await self.store.list(HABIT_LOGS, self.user_id, habit_id=habit_id, date=day)
        return rows[0] if rows else None

    async def toggle_log(self, habit_id: str, day: DayLike) -> bool:
        """Delete the (habit, day) log if one exists, else create it.

        Returns True when the habit ends up completed for ``day``.
        """
        self._require_habit(habit_id)
        key = format_day(day)
        local = self.log_for(habit_id, key)

        async with self._mutation("toggle_log"):
            self._put_log(None if local else self._temp_log(habit_id, key), habit_id, key)

            existing = await self._remote_log(habit_id, key)
            if existing is not None:
                await self.store.delete(HABIT_LOGS, existing.id)
                self._put_log(None, habit_id, key)
                completed = False
            else:
                confirmed = await self.store.insert(
                    HABIT_LOGS, {"user_id": self.user_id, "habit_id": habit_id, "date": key}
                )
                self._put_log(confirmed, habit_id, key)
                completed = True
        return completed

    async def toggle_habit(self, habit_id: str, day: DayLike) -> bool:
        return await self.toggle_log(habit_id, format_day(day))

    async def add_log_with_value(self, habit_id: str, day: DayLike, amount: float) -> HabitLog:
        """Add ``amount`` to the day's running total, creating the log if needed."""
        self._require_habit(habit_id)
        if amount is None or amount <= 0:
            raise HabitValidationError("amount must be positive")
        key = format_day(day)
        local = self.log_for(habit_id, key)

        async with self._mutation("add_log_with_value"):
            if local is not None:
                optimistic = local.model_copy(update={"value": (local.value or 0) + amount})
            else:
                optimistic = self._temp_log(habit_id, key, amount)
            self._put_log(optimistic, habit_id, key)

            existing = await self._remote_log(habit_id, key)
            if existing is not None:
                total = (existing.value or 0) + amount
                await self.store.update(HABIT_LOGS, existing.id, {"value": total})
                confirmed = existing.model_copy(update={"value": total})
            else:
                confirmed = await self.store.insert(
                    HABIT_LOGS, {"user_id": self.user_id, "habit_id": habit_id, "date": key, "value": amount}
                )
            self._put_log(confirmed, habit_id, key)
        return confirmed

    async def update_log_value(self, habit_id: str, day: DayLike, value: float) -> Optional[HabitLog]:
        """Overwrite the day's total. Zero removes the log instead of keeping an empty row."""
        self._require_habit(habit_id)
        if value is None or value < 0:
            raise HabitValidationError("value cannot be negative")
        key = format_day(day)
        local = self.log_for(habit_id, key)

        async with self._mutation("update_log_value"):
            if value == 0:
                optimistic = None
            elif local is not None:
                optimistic = local.model_copy(update={"value": value})
            else:
                optimistic = self._temp_log(habit_id, key, value)
            self._put_log(optimistic, habit_id, key)

            existing = await self._remote_log(habit_id, key)
            confirmed: Optional[HabitLog] = None
            if value == 0:
                if existing is not None:
                    await self.store.delete(HABIT_LOGS, existing.id)
            elif existing is not None:
                await self.store.update(HABIT_LOGS, existing.id, {"value": value})
                confirmed = existing.model_copy(update={"value": value})
            else:
                confirmed = await self.store.insert(
                    HABIT_LOGS, {"user_id": self.user_id, "habit_id": habit_id, "date": key, "value": value}
                )
            self._put_log(confirmed, habit_id, key)
        return confirmed
