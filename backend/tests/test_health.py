"""Health check tests."""

import pytest


@pytest.mark.asyncio
async def test_health_check(anon_client):
    response = await anon_client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"


@pytest.mark.asyncio
async def test_readiness_check(anon_client):
    response = await anon_client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["database"] == "ok"
