"""
Webhook route binding
"""

import logging
from typing import Any, Awaitable, Callable

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from core.client import invoke_handler
from core.errors import HandlerExecutionError
from core.registry import CapabilityKind, CapabilityRegistry

logger = logging.getLogger('archon.handlers.webhook_handler')


def failure_reason(error: BaseException) -> str:
    return str(error) or "Reason unknown"


def make_endpoint(path: str, handler: Callable) -> Callable[[Request], Awaitable[PlainTextResponse]]:
    """
    Wrap a webhook handler into a FastAPI endpoint.

    The handler receives the decoded JSON body and returns the text
    acknowledgement sent back with a 200. Any exception becomes a 500 whose
    body names the failure.
    """

    async def endpoint(request: Request) -> PlainTextResponse:
        try:
            payload = await request.json()
            acknowledgement = await invoke_handler(handler, payload)
        except Exception as e:
            error = HandlerExecutionError(path, e)
            logger.error(f"[Webhook] {error}", exc_info=e)
            return PlainTextResponse(f"Failed to process webhook: {failure_reason(e)}", status_code=500)

        return PlainTextResponse(str(acknowledgement or "OK"), status_code=200)

    endpoint.__name__ = f"webhook_{getattr(handler, '__name__', 'handler')}"
    return endpoint


def register_webhooks(registry: CapabilityRegistry, router: APIRouter) -> int:
    """
    Add a POST route on ``router`` for every registered webhook.

    Returns:
        Number of routes added
    """
    total = 0
    for owner in registry.owners(CapabilityKind.WEBHOOK):
        instance = owner()
        for entry in registry.entries(CapabilityKind.WEBHOOK, owner):
            logger.debug(f"Registering webhook on path: {entry.path}")
            router.add_api_route(
                entry.path,
                make_endpoint(entry.path, entry.bind(instance)),
                methods=["POST"],
                response_class=PlainTextResponse
            )
            total += 1

    logger.info(f"Registered {total} webhooks")
    return total
