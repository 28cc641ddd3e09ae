"""Tests for the health check endpoints."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.health import HealthCheckServer


@pytest.fixture
def bot():
    bot = MagicMock()
    bot.is_ready = MagicMock(return_value=True)
    bot.latency = 0.042
    bot.guilds = [MagicMock()]
    bot.suggestions_db = MagicMock()
    bot.suggestions_db.health_check_async = AsyncMock(return_value=True)
    return bot


async def _health(server):
    response = await server._handle_health(MagicMock())
    return json.loads(response.text)


class TestHealthEndpoint:

    async def test_root(self, bot):
        response = await HealthCheckServer(bot, port=0)._handle_root(MagicMock())
        assert response.text == "OK"

    async def test_healthy(self, bot):
        status = await _health(HealthCheckServer(bot, port=0))

        assert status["status"] == "healthy"
        assert status["discord"] == {"connected": True, "latency_ms": 42, "guilds": 1}
        assert status["database"] == {"healthy": True}

    async def test_degraded_database(self, bot):
        bot.suggestions_db.health_check_async.return_value = False
        assert (await _health(HealthCheckServer(bot, port=0)))["status"] == "degraded"

    async def test_starting(self, bot):
        bot.is_ready.return_value = False
        bot.suggestions_db = None

        status = await _health(HealthCheckServer(bot, port=0))

        assert status["status"] == "starting"
        assert status["discord"]["latency_ms"] is None
        assert status["database"]["healthy"] is False

    def test_routes(self, bot):
        app = HealthCheckServer(bot, port=0).create_app()
        paths = {route.resource.canonical for route in app.router.routes()}
        assert {"/", "/health"} <= paths
