"""Tests for health and readiness endpoints."""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": "0.1.0"}

    @pytest.mark.asyncio
    async def test_ready_with_database(self, client):
        response = await client.get("/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ready", "database": "ok"}

    @pytest.mark.asyncio
    async def test_not_ready_without_database(self, client):
        outage = OperationalError("SELECT 1", {}, Exception("connection refused"))

        with patch("api.routes.health.ping_db", AsyncMock(side_effect=outage)):
            response = await client.get("/ready")

        assert response.status_code == 503
        assert response.json() == {"status": "unavailable", "database": "unreachable"}
