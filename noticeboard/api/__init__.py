"""API router aggregation."""

from fastapi import APIRouter

from noticeboard.api.comments import router as comments_router
from noticeboard.api.health import router as health_router
from noticeboard.api.notices import router as notices_router
from noticeboard.api.notifications import router as notifications_router
from noticeboard.api.realtime import router as realtime_router

# Main API router (for /api/* endpoints)
api_router = APIRouter(prefix="/api")

api_router.include_router(health_router)
api_router.include_router(notices_router)
api_router.include_router(comments_router)
api_router.include_router(notifications_router)

# Websocket router (mounted directly, not under /api)
__all__ = ["api_router", "realtime_router"]
