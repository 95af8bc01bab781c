"""
HTTP surface of the StoryCrafter MCP server.

A single ``/mcp`` endpoint: ``GET`` returns service info, ``POST`` accepts
``tools/list`` and ``tools/call`` requests.
"""

import json
import logging
from typing import Optional

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from storycrafter_mcp.auth import BearerAuth
from storycrafter_mcp.config import StoryCrafterConfig
from storycrafter_mcp.errors import ParseError
from storycrafter_mcp.protocol import ProtocolHandler, error_response, service_info
from storycrafter_mcp.tools.dispatcher import ToolDispatcher

logger = logging.getLogger(__name__)


def create_app(
    config: StoryCrafterConfig,
    dispatcher: Optional[ToolDispatcher] = None,
) -> Starlette:
    """
    Build the Starlette application.

    Args:
        config: Server configuration
        dispatcher: Tool dispatcher (built from ``config`` if not given)

    Returns:
        Starlette app serving ``/mcp``
    """
    dispatcher = dispatcher or ToolDispatcher.from_config(config)
    handler = ProtocolHandler(
        dispatcher,
        BearerAuth(required=config.auth_required),
    )

    async def mcp_info(request: Request) -> JSONResponse:
        return JSONResponse(service_info(dispatcher, config.service_url))

    async def mcp_request(request: Request) -> JSONResponse:
        raw = await request.body()
        try:
            body = json.loads(raw) if raw else None
        except ValueError:
            logger.debug("Rejected request with unparseable JSON body")
            status, payload = error_response(ParseError("Request body is not valid JSON"))
            return JSONResponse(payload, status_code=status)

        status, payload = await handler.handle(
            body,
            authorization=request.headers.get("authorization"),
        )
        return JSONResponse(payload, status_code=status)

    routes = [
        Route("/mcp", mcp_info, methods=["GET"]),
        Route("/mcp", mcp_request, methods=["POST"]),
    ]
    return Starlette(routes=routes)
