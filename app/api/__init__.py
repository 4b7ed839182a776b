from fastapi import APIRouter

from app.api.analytics import router as analytics_router
from app.api.habits import router as habits_router

router = APIRouter()
router.include_router(habits_router)
router.include_router(analytics_router)

__all__ = ["router"]
