"""
Notice Board - campus notice board backend

Main FastAPI application with:
- Notices filtered by department, year and category
- Threaded comments
- Per-user notifications
- Real-time updates over websockets
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from noticeboard.api import api_router, realtime_router
from noticeboard.config import settings
from noticeboard.db import AsyncSessionLocal
from noticeboard.errors import NoticeBoardError
from noticeboard.models import Base
from noticeboard.services.broadcaster import Broadcaster
from noticeboard.services.notifier import NotificationRecorder

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
    - Creates tables when auto_create_tables is set

    Shutdown:
    - Drops every websocket connection
    """
    logger.info("Starting Notice Board...")

    if settings.auto_create_tables:
        engine = app.state.session_factory.kw["bind"]
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    logger.info("Notice Board started successfully!")

    yield

    # Shutdown
    logger.info("Shutting down Notice Board...")
    await app.state.broadcaster.close()


def _error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
    )


def _format_validation_messages(exc: RequestValidationError) -> list[str]:
    messages: list[str] = []
    for err in exc.errors():
        loc = [str(v) for v in err.get("loc", []) if str(v) not in {"body", "query", "path"}]
        field = ".".join(loc) if loc else "field"
        err_type = str(err.get("type", ""))
        message = str(err.get("msg", "Invalid value"))

        if err_type == "missing":
            messages.append(f"{field} is required")
        elif "string_too_short" in err_type:
            messages.append(f"{field} cannot be empty")
        elif err_type.startswith("int_"):
            messages.append(f"{field} must be a valid id")
        else:
            messages.append(f"{field}: {message}")
    return messages


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as the {success: false, message} envelope."""

    @app.exception_handler(NoticeBoardError)
    async def notice_board_error_handler(request: Request, exc: NoticeBoardError):
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        messages = _format_validation_messages(exc)
        detail = messages[0] if len(messages) == 1 else "Validation failed"
        return _error_response(status.HTTP_400_BAD_REQUEST, detail, errors=messages)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Something went wrong")


def create_app(
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    broadcaster: Optional[Broadcaster] = None,
) -> FastAPI:
    """
    Build the application.

    ``session_factory`` is where notifications are written after a request
    commits and where websocket handshakes resolve their token; it defaults
    to the configured database.
    """
    app = FastAPI(
        title="Notice Board",
        description="Campus notice board with comments, notifications and live updates",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
    )

    app.state.session_factory = session_factory or AsyncSessionLocal
    app.state.broadcaster = broadcaster or Broadcaster(send_timeout=settings.broadcast_send_timeout)
    app.state.recorder = NotificationRecorder(app.state.session_factory)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(api_router)  # /api/* endpoints
    app.include_router(realtime_router)  # /ws

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "noticeboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=not settings.is_production,
    )
