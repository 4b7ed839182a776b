from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from app.api.deps import get_coordinator, http_error
from app.dates import format_day
from app.errors import HabitCoreError
from app.schemas import HabitCreateIn, HabitLog, HabitOut, HabitUpdateIn, LogToggleIn, LogValueIn, SkipDayIn
from app.sync import SyncCoordinator

router = APIRouter(prefix="/v1", tags=["habits"])


def _habit_payload(coordinator: SyncCoordinator, habit_id: str) -> Dict[str, Any]:
    habit = coordinator.get_habit(habit_id)
    return HabitOut.from_record(habit).model_dump(mode="json") if habit else {}


def _log_payload(log: Optional[HabitLog]) -> Optional[Dict[str, Any]]:
    return log.model_dump(mode="json") if log else None


@router.get("/habits/{user_id}")
def list_habits(include_archived: bool = True, coordinator: SyncCoordinator = Depends(get_coordinator)) -> Dict[str, Any]:
    habits = coordinator.habits
    if not include_archived:
        habits = tuple(h for h in habits if h.archived_at is None)
    ordered = sorted(habits, key=lambda h: h.priority)
    return {"items": [HabitOut.from_record(h).model_dump(mode="json") for h in ordered]}


@router.post("/habits/{user_id}")
async def create_habit(payload: HabitCreateIn, coordinator: SyncCoordinator = Depends(get_coordinator)) -> Dict[str, Any]:
    try:
        habit = await coordinator.add_habit(payload)
    except HabitCoreError as exc:
        raise http_error(exc) from exc
    return _habit_payload(coordinator, habit.id)


@router.patch("/habits/{user_id}/{habit_id}")
async def update_habit(
    habit_id: str,
    payload: HabitUpdateIn,
    coordinator: SyncCoordinator = Depends(get_coordinator),
) -> Dict[str, Any]:
    try:
        await coordinator.update_habit(habit_id, payload)
    except HabitCoreError as exc:
        raise http_error(exc) from exc
    return _habit_payload(coordinator, habit_id)


@router.post("/habits/{user_id}/{habit_id}/archive")
async def archive_habit(habit_id: str, coordinator: SyncCoordinator = Depends(get_coordinator)) -> Dict[str, Any]:
    try:
        await coordinator.archive_habit(habit_id)
    except HabitCoreError as exc:
        raise http_error(exc) from exc
    return _habit_payload(coordinator, habit_id)


@router.post("/habits/{user_id}/{habit_id}/resume")
async def resume_habit(habit_id: str, coordinator: SyncCoordinator = Depends(get_coordinator)) -> Dict[str, Any]:
    try:
        await coordinator.resume_habit(habit_id)
    except HabitCoreError as exc:
        raise http_error(exc) from exc
    return _habit_payload(coordinator, habit_id)


@router.delete("/habits/{user_id}/{habit_id}")
async def delete_habit(habit_id: str, coordinator: SyncCoordinator = Depends(get_coordinator)) -> Dict[str, Any]:
    try:
        await coordinator.delete_habit(habit_id)
    except HabitCoreError as exc:
        raise http_error(exc) from exc
    return {"ok": True}


@router.post("/habits/{user_id}/{habit_id}/skip")
async def toggle_skip_day(
    habit_id: str,
    payload: SkipDayIn,
    coordinator: SyncCoordinator = Depends(get_coordinator),
) -> Dict[str, Any]:
    try:
        skipped = await coordinator.toggle_skip_day(habit_id, payload.date)
    except HabitCoreError as exc:
        raise http_error(exc) from exc
    return {"date": payload.date, "skipped": skipped}


@router.get("/logs/{user_id}")
def list_logs(date: Optional[str] = None, coordinator: SyncCoordinator = Depends(get_coordinator)) -> Dict[str, Any]:
    try:
        logs = coordinator.logs_for_date(date) if date else list(coordinator.logs)
    except HabitCoreError as exc:
        raise http_error(exc) from exc
    return {"items": [log.model_dump(mode="json") for log in logs]}


@router.post("/logs/{user_id}/toggle")
async def toggle_log(payload: LogToggleIn, coordinator: SyncCoordinator = Depends(get_coordinator)) -> Dict[str, Any]:
    try:
        completed = await coordinator.toggle_log(payload.habit_id, payload.date)
    except HabitCoreError as exc:
        raise http_error(exc) from exc
    return {
        "habit_id": payload.habit_id,
        "date": format_day(payload.date),
        "completed": completed,
        "log": _log_payload(coordinator.log_for(payload.habit_id, payload.date)),
    }


@router.post("/logs/{user_id}/value")
async def add_log_value(payload: LogValueIn, coordinator: SyncCoordinator = Depends(get_coordinator)) -> Dict[str, Any]:
    try:
        log = await coordinator.add_log_with_value(payload.habit_id, payload.date, payload.value)
    except HabitCoreError as exc:
        raise http_error(exc) from exc
    return {"log": _log_payload(log)}


@router.put("/logs/{user_id}/value")
async def set_log_value(payload: LogValueIn, coordinator: SyncCoordinator = Depends(get_coordinator)) -> Dict[str, Any]:
    try:
        log = await coordinator.update_log_value(payload.habit_id, payload.date, payload.value)
    except HabitCoreError as exc:
        raise http_error(exc) from exc
    return {"log": _log_payload(log)}
