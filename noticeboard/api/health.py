"""
Health check endpoints.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from noticeboard.db import get_db
from noticeboard.schemas import ApiResponse

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("", response_model=ApiResponse[dict])
async def health_check():
    """
    Basic health check.

    Returns 200 if the service is running.
    """
    return ApiResponse(data={"status": "healthy", "service": "noticeboard"})


@router.get("/ready", response_model=ApiResponse[dict])
async def readiness_check(request: Request, db: AsyncSession = Depends(get_db)):
    """
    Readiness check with database connectivity.

    Also reports how many websocket clients are connected.
    """
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        return ApiResponse(
            success=False,
            message="Database unavailable",
            data={"status": "not_ready", "database": f"error: {str(e)}"},
        )

    return ApiResponse(data={
        "status": "ready",
        "database": "connected",
        "connections": len(request.app.state.broadcaster.connections),
    })


@router.get("/live", response_model=ApiResponse[dict])
async def liveness_check():
    """
    Liveness check.

    Returns 200 if the service is alive.
    """
    return ApiResponse(data={"status": "alive"})
