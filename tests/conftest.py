"""
Pytest configuration and fixtures.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./noticeboard-test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from itertools import count
from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from noticeboard.auth.dependencies import get_current_user, get_current_user_optional
from noticeboard.db import get_db
from noticeboard.main import create_app
from noticeboard.models import Base, Notice, NoticeCategory, NoticeStatus, User, UserRole
from noticeboard.services.broadcaster import Broadcaster


_emails = count(1)


class FakeWebSocket:
    """Stands in for a starlette WebSocket; records every frame sent."""

    def __init__(self, fail: bool = False):
        self.accepted = False
        self.closed = False
        self.fail = fail
        self.sent: list[dict] = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket gone")
        self.sent.append(data)

    async def close(self, code: int = 1000):
        self.closed = True

    @property
    def events(self) -> list[str]:
        return [frame["event"] for frame in self.sent]


# ── Database ────────────────────────────────────────────


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """
    Create test database engine.

    File-backed so that notification writes, which use their own sessions,
    see the rows committed by the request.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create test database session."""
    async with session_factory() as session:
        yield session


# ── Factories ───────────────────────────────────────────


@pytest_asyncio.fixture
async def make_user(db_session):
    async def _make(
        name: str = "User",
        role: UserRole = UserRole.STUDENT,
        department: Optional[str] = "CSE",
        year: Optional[str] = None,
        is_active: bool = True,
    ) -> User:
        user = User(
            name=name,
            email=f"user{next(_emails)}@campus.test",
            role=role,
            department=department,
            year=year,
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest_asyncio.fixture
async def make_notice(db_session):
    async def _make(author: User, **overrides) -> Notice:
        fields = {
            "title": "Mid-term timetable",
            "content": "Exams start on Monday.",
            "category": NoticeCategory.EXAMS,
            "department": "CSE",
            "status": NoticeStatus.PUBLISHED,
            "attachments": [],
        }
        fields.update(overrides)
        notice = Notice(author_id=author.id, **fields)
        db_session.add(notice)
        await db_session.commit()
        return notice

    return _make


# ── Application ─────────────────────────────────────────


@pytest_asyncio.fixture
async def broadcaster():
    instance = Broadcaster(send_timeout=1.0)
    yield instance
    await instance.close()


@pytest_asyncio.fixture
async def app(session_factory, broadcaster):
    application = create_app(session_factory=session_factory, broadcaster=broadcaster)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db] = override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def act_as(app):
    """
    Switch the acting user for subsequent requests.

    ``act_as(None)`` restores real token resolution, so requests without an
    Authorization header are anonymous.
    """
    def _act_as(user: Optional[User]) -> None:
        if user is None:
            app.dependency_overrides.pop(get_current_user, None)
            app.dependency_overrides.pop(get_current_user_optional, None)
            return
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_current_user_optional] = lambda: user

    return _act_as


@pytest_asyncio.fixture
async def connect_socket(broadcaster):
    """Connect a fake websocket to the test broadcaster."""
    async def _connect(user_id: Optional[int] = None, fail: bool = False):
        websocket = FakeWebSocket(fail=fail)
        connection = await broadcaster.connect(websocket, user_id=user_id)
        return websocket, connection

    return _connect
