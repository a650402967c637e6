"""
Health check endpoint tests.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from noticeboard.db import get_db


@pytest.mark.asyncio
async def test_health_endpoint(client):
    response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": None,
        "data": {"status": "healthy", "service": "noticeboard"},
    }


@pytest.mark.asyncio
async def test_readiness_reports_database_and_connections(client, connect_socket):
    await connect_socket()

    response = await client.get("/api/health/ready")

    body = response.json()
    assert body["success"] is True
    assert body["data"] == {"status": "ready", "database": "connected", "connections": 1}


@pytest.mark.asyncio
async def test_readiness_without_database(app, client):
    class UnreachableSession(AsyncSession):
        async def execute(self, *args, **kwargs):
            raise ConnectionRefusedError("connection refused")

    async def broken_db():
        yield UnreachableSession()

    app.dependency_overrides[get_db] = broken_db

    response = await client.get("/api/health/ready")

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is False
    assert body["message"] == "Database unavailable"
    assert body["data"]["status"] == "not_ready"


@pytest.mark.asyncio
async def test_liveness(client):
    response = await client.get("/api/health/live")

    assert response.json()["data"] == {"status": "alive"}


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client):
    response = await client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json()["success"] is False
