"""
Webhook HTTP server for Archon

Serves every registered webhook under ``/webhook`` with FastAPI, run by
uvicorn on the bot's event loop.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import APIRouter, FastAPI

from core.registry import CapabilityRegistry
from handlers.webhook_handler import register_webhooks

logger = logging.getLogger('archon.services.webhook_server')

WEBHOOK_PREFIX = "/webhook"


def create_webhook_app(registry: CapabilityRegistry) -> FastAPI:
    """Build the FastAPI app with one POST route per registered webhook"""
    app = FastAPI(
        title="Archon Webhooks",
        description="Inbound webhooks relayed to Discord",
        version="1.0.0",
        docs_url=None,
        redoc_url=None
    )

    router = APIRouter()
    register_webhooks(registry, router)
    app.include_router(router, prefix=WEBHOOK_PREFIX, tags=["webhooks"])

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    return app


class WebhookServer:
    """
    uvicorn server wrapper with start/stop on the running loop.

    Args:
        registry: Capability registry holding the webhook table
        host: Interface to bind
        port: TCP port
    """

    def __init__(self, registry: CapabilityRegistry, host: str = "0.0.0.0", port: int = 3030):
        self.host = host
        self.port = port
        self.app = create_webhook_app(registry)
        self.server: Optional[uvicorn.Server] = None
        self.server_task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self.server_task is not None and not self.server_task.done()

    def build_server(self) -> uvicorn.Server:
        config = uvicorn.Config(
            app=self.app,
            host=self.host,
            port=self.port,
            log_level="info",
            access_log=True,
            log_config=None
        )
        return uvicorn.Server(config)

    async def start(self) -> None:
        """Start serving in a background task"""
        if self.is_running:
            logger.warning("Webhook server is already running")
            return

        self.server = self.build_server()
        self.server_task = asyncio.create_task(self.server.serve())
        logger.info(f"Webhook server listening on {self.host}:{self.port}")

    async def stop(self) -> None:
        """Ask uvicorn to exit and wait for it"""
        if not self.is_running:
            return

        self.server.should_exit = True
        try:
            await self.server_task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Webhook server stopped with error: {e}")

        self.server_task = None
        logger.info("Webhook server stopped")
