from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from app import analytics
from app.api.deps import get_coordinator, http_error
from app.config import settings
from app.dates import days_in_month, format_day, month_start, parse_day, parse_month
from app.errors import HabitCoreError
from app.schemas import DueOut, StreakOut
from app.sync import SyncCoordinator

router = APIRouter(prefix="/v1/analytics", tags=["analytics"])


def _month_or_current(month: Optional[str]) -> date:
    return parse_month(month) if month else month_start(date.today())


@router.get("/{user_id}/due")
def due_today(
    day_param: Optional[str] = Query(default=None, alias="date"),
    coordinator: SyncCoordinator = Depends(get_coordinator),
) -> Dict[str, Any]:
    try:
        day = parse_day(day_param) if day_param else date.today()
    except HabitCoreError as exc:
        raise http_error(exc) from exc

    snapshot = coordinator.snapshot()
    key = format_day(day)
    logs = {log.habit_id: log for log in snapshot.logs if log.date == key}
    items = []
    for habit in analytics.visible_habits(snapshot.habits, day):
        log = logs.get(habit.id)
        items.append(
            DueOut(
                habit_id=habit.id,
                name=habit.name,
                due=analytics.is_due(habit, day),
                completed=analytics.is_day_complete(habit, log),
                value=log.value if log else None,
            ).model_dump()
        )
    completed, scheduled = analytics.daily_completion(snapshot.habits, snapshot.logs, day)
    return {"date": key, "items": items, "completed": completed, "scheduled": scheduled}


@router.get("/{user_id}/streaks")
def streaks(coordinator: SyncCoordinator = Depends(get_coordinator)) -> Dict[str, Any]:
    snapshot = coordinator.snapshot()
    logs = list(snapshot.logs)
    items = [
        StreakOut(
            habit_id=habit.id,
            name=habit.name,
            cadence=habit.streak_cadence,
            current=analytics.streak(habit, logs, first_weekday=settings.WEEK_START),
            longest=analytics.longest_streak(habit, logs, first_weekday=settings.WEEK_START),
        ).model_dump()
        for habit in snapshot.habits
    ]
    best = analytics.best_streak(snapshot.habits, logs, first_weekday=settings.WEEK_START)
    return {
        "items": items,
        "best": {"habit_id": best[0].id, "name": best[0].name, "streak": best[1]} if best else None,
    }


@router.get("/{user_id}/goals")
def goals(
    month: Optional[str] = None,
    day: Optional[int] = None,
    coordinator: SyncCoordinator = Depends(get_coordinator),
) -> Dict[str, Any]:
    try:
        viewed = _month_or_current(month)
    except HabitCoreError as exc:
        raise http_error(exc) from exc

    today = date.today()
    if day is None:
        day = today.day if month_start(today) == viewed else days_in_month(viewed)
    day = max(1, min(day, days_in_month(viewed)))

    snapshot = coordinator.snapshot()
    items = []
    for habit in snapshot.habits:
        progress = analytics.monthly_progress(habit, snapshot.logs, viewed)
        pacing = analytics.goal_pacing(habit, progress.completed, day, viewed)
        items.append({**progress.model_dump(), "name": habit.name, "pacing": pacing.model_dump()})
    return {"month": viewed.strftime("%Y-%m"), "day": day, "items": items}


@router.get("/{user_id}/categories")
def categories(month: Optional[str] = None, coordinator: SyncCoordinator = Depends(get_coordinator)) -> Dict[str, Any]:
    try:
        viewed = _month_or_current(month)
    except HabitCoreError as exc:
        raise http_error(exc) from exc
    snapshot = coordinator.snapshot()
    items = analytics.category_breakdown(snapshot.habits, snapshot.logs, viewed)
    return {"month": viewed.strftime("%Y-%m"), "items": [item.model_dump() for item in items]}


@router.get("/{user_id}/badges")
def badges(coordinator: SyncCoordinator = Depends(get_coordinator)) -> Dict[str, Any]:
    snapshot = coordinator.snapshot()
    items = analytics.badges(snapshot.habits, snapshot.logs, first_weekday=settings.WEEK_START)
    return {"items": [item.model_dump() for item in items]}
