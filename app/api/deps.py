from fastapi import HTTPException, Request

from app.errors import HabitCoreError, HabitNotFoundError, HabitValidationError, RemoteWriteError
from app.sync import CoordinatorRegistry, SyncCoordinator


def get_registry(request: Request) -> CoordinatorRegistry:
    return request.app.state.registry


async def get_coordinator(user_id: str, request: Request) -> SyncCoordinator:
    return await get_registry(request).get(user_id)


def http_error(exc: HabitCoreError) -> HTTPException:
    if isinstance(exc, HabitValidationError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, HabitNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, RemoteWriteError):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))
