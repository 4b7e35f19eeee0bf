"""
Sprocket - Health Endpoint
==========================

Small aiohttp app the host probes on PORT.

DESIGN:
    The hosting platform wants a web process, so the bot answers HTTP
    from inside its own event loop. "/" is a plain liveness string for
    uptime pingers; "/health" returns JSON built by collect_status()
    and is 503 until the gateway connection is ready.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import time
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from aiohttp import web

from sprocket.core.logger import logger, LOCAL_TZ

if TYPE_CHECKING:
    from sprocket.bot import SprocketBot


def _service_state(service) -> str:
    if service is None:
        return "not started"
    return "running" if getattr(service, "running", False) else "stopped"


def collect_status(bot: "SprocketBot", started_at: float) -> Dict[str, Any]:
    """Snapshot of the bot and its background services."""
    ready = bot.is_ready()
    store = getattr(bot, "announcement_store", None)
    latency = bot.latency if ready else None

    return {
        "status": "healthy" if ready else "starting",
        "uptime_seconds": int(time.monotonic() - started_at),
        "guilds": len(bot.guilds),
        "latency_ms": round(latency * 1000) if latency is not None else None,
        "pending_announcements": store.count() if store else 0,
        "services": {
            "announcement_sweeper": _service_state(getattr(bot, "announcement_sweeper", None)),
            "archive_scheduler": _service_state(getattr(bot, "archive_scheduler", None)),
        },
        "timestamp": datetime.now(LOCAL_TZ).isoformat(),
    }


class HealthCheckServer:
    """Serves / and /health until stopped."""

    def __init__(self, bot: "SprocketBot", port: int = 10000) -> None:
        self.bot = bot
        self.port = port
        self.started_at = time.monotonic()
        self.runner: Optional[web.AppRunner] = None

        self.app = web.Application()
        self.app.add_routes([
            web.get("/", self.handle_root),
            web.get("/health", self.handle_health),
        ])

    async def handle_root(self, request: web.Request) -> web.Response:
        return web.Response(text="Sprocket is running")

    async def handle_health(self, request: web.Request) -> web.Response:
        status = collect_status(self.bot, self.started_at)
        return web.json_response(status, status=200 if status["status"] == "healthy" else 503)

    async def start(self) -> None:
        """Bind the port; a failure is logged and the bot keeps running."""
        runner = web.AppRunner(self.app, access_log=None)
        await runner.setup()
        try:
            await web.TCPSite(runner, "0.0.0.0", self.port).start()
        except OSError as e:
            await runner.cleanup()
            logger.error("Health Server Failed To Bind", [
                ("Port", str(self.port)),
                ("Error", str(e)[:100]),
            ])
            return

        self.runner = runner
        logger.tree("Health Server Started", [
            ("Port", str(self.port)),
            ("Endpoints", "/ and /health"),
        ], emoji="🏥")

    async def stop(self) -> None:
        if self.runner is None:
            return
        await self.runner.cleanup()
        self.runner = None
        logger.info("Health Server Stopped")


__all__ = ["HealthCheckServer", "collect_status"]
