"""HTTP health endpoint for the service registry."""

import logging
from typing import Optional

from aiohttp import web
from aiohttp.web import Request, Response

from constants import HEALTH_HOST, HEALTH_PORT
from service import ServiceRegistry

logger = logging.getLogger(__name__)


class HealthServer:
    """Serves the state of every registered service as JSON."""

    def __init__(self, registry: ServiceRegistry, host: str = HEALTH_HOST, port: int = HEALTH_PORT):
        self.registry = registry
        self.host = host
        self.port = port
        self.app = web.Application()
        self.app.router.add_get("/health", self.health_check)
        self.runner: Optional[web.AppRunner] = None

    async def health_check(self, request: Request) -> Response:
        """Health check endpoint."""
        healthy = self.registry.healthy()
        return web.json_response(
            {"status": "healthy" if healthy else "unhealthy", "services": self.registry.snapshot()},
            status=200 if healthy else 503,
        )

    async def start(self):
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        site = web.TCPSite(self.runner, self.host, self.port)
        await site.start()
        logger.info(f"Health endpoint listening on http://{self.host}:{self.port}/health")

    async def stop(self):
        if self.runner is not None:
            await self.runner.cleanup()
            self.runner = None
