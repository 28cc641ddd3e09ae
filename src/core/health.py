"""
Suggestion Bot - Health Check Server
====================================

Small aiohttp server for uptime monitors.

Routes:
- GET /        plain "OK" while the process is alive
- GET /health  JSON: overall status, Discord connection, database, uptime

Overall status:
- starting  Discord client not ready yet
- healthy   ready and the database answers
- degraded  ready but the database check failed

Usage:
    curl http://localhost:8080/health
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from aiohttp import web

from src.core.config import BOT_TZ, HEALTH_PORT
from src.core.logger import logger

if TYPE_CHECKING:
    from src.bot import SuggestionBot


def _format_uptime(seconds: int) -> str:
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}h {minutes}m {secs}s"


class HealthCheckServer:
    """Serves liveness and readiness status for the bot."""

    def __init__(self, bot: "SuggestionBot", port: int = HEALTH_PORT) -> None:
        self.bot = bot
        self.port = port
        self.start_time = datetime.now(BOT_TZ)
        self._runner: Optional[web.AppRunner] = None

    def create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/", self._handle_root)
        app.router.add_get("/health", self._handle_health)
        return app

    async def start(self) -> None:
        """Bind to 0.0.0.0:port and start serving."""
        runner = web.AppRunner(self.create_app())
        await runner.setup()
        await web.TCPSite(runner, "0.0.0.0", self.port).start()
        self._runner = runner

        logger.tree("Health Server Listening", [
            ("Port", str(self.port)),
            ("Routes", "/, /health"),
        ], emoji="🏥")

    async def stop(self) -> None:
        if self._runner is None:
            return
        await self._runner.cleanup()
        self._runner = None
        logger.info("Health Server Stopped", [("Port", str(self.port))])

    async def _handle_root(self, request: web.Request) -> web.Response:
        return web.Response(text="OK", content_type="text/plain")

    async def _handle_health(self, request: web.Request) -> web.Response:
        return web.json_response(await self.snapshot())

    async def snapshot(self) -> dict[str, Any]:
        """Current status document served at /health."""
        now = datetime.now(BOT_TZ)
        uptime = int((now - self.start_time).total_seconds())

        ready = self.bot.is_ready()
        db = self.bot.suggestions_db
        db_healthy = await db.health_check_async() if db is not None else False

        if not ready:
            overall = "starting"
        else:
            overall = "healthy" if db_healthy else "degraded"

        return {
            "status": overall,
            "run_id": logger.run_id,
            "started_at": self.start_time.isoformat(),
            "timestamp": now.isoformat(),
            "uptime": _format_uptime(uptime),
            "uptime_seconds": uptime,
            "discord": {
                "connected": ready,
                "latency_ms": round(self.bot.latency * 1000) if ready else None,
                "guilds": len(self.bot.guilds) if ready else 0,
            },
            "database": {
                "healthy": db_healthy,
            },
        }


__all__ = ["HealthCheckServer"]
