"""
JSON-RPC-like request handling for the ``/mcp`` endpoint.

This is the single place where errors become wire responses. Every
StoryCrafterError carries its own JSON-RPC code and HTTP status; anything
else is logged and reported as an internal error. Nothing raised by a tool
call escapes to the HTTP layer.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from storycrafter_mcp import __version__
from storycrafter_mcp.auth import BearerAuth
from storycrafter_mcp.errors import (
    INTERNAL_ERROR,
    InvalidRequestError,
    MethodNotFoundError,
    StoryCrafterError,
)
from storycrafter_mcp.tools.dispatcher import ToolDispatcher

logger = logging.getLogger(__name__)


SERVICE_NAME = "StoryCrafter MCP"
SERVICE_DESCRIPTION = "AI-powered backlog generator for VISHKAR consensus"

LIST_TOOLS = "tools/list"
CALL_TOOL = "tools/call"

Response = Tuple[int, Dict[str, Any]]


def error_response(error: StoryCrafterError) -> Response:
    """Render an error as (HTTP status, ``{"error": {...}}``)."""
    return error.status_code, {"error": error.to_error()}


def service_info(dispatcher: ToolDispatcher, service_url: Optional[str] = None) -> Dict[str, Any]:
    """Return the health/info document served on ``GET /mcp``."""
    info = {
        "name": SERVICE_NAME,
        "version": __version__,
        "description": SERVICE_DESCRIPTION,
        "tools": dispatcher.tool_names(),
        "status": "healthy",
    }
    if service_url:
        info["service_url"] = service_url
    return info


class ProtocolHandler:
    """Dispatches ``tools/list`` and ``tools/call`` requests."""

    def __init__(self, dispatcher: ToolDispatcher, auth: Optional[BearerAuth] = None):
        self.dispatcher = dispatcher
        self.auth = auth or BearerAuth(required=False)

    async def handle(self, body: Any, authorization: Optional[str] = None) -> Response:
        """
        Handle one decoded request body.

        Args:
            body: Decoded JSON request body
            authorization: Raw ``Authorization`` header value, if any

        Returns:
            Tuple of (HTTP status code, JSON response body)
        """
        try:
            return await self._handle(body, authorization)
        except StoryCrafterError as e:
            return error_response(e)
        except Exception:
            logger.exception("MCP Error: unexpected failure handling request")
            return 500, {"error": {"code": INTERNAL_ERROR, "message": "Internal error"}}

    async def _handle(self, body: Any, authorization: Optional[str]) -> Response:
        if not isinstance(body, dict):
            raise InvalidRequestError("Request body must be a JSON object")

        method = body.get("method")

        if method == LIST_TOOLS:
            return 200, {"tools": self.dispatcher.list_tools()}

        if method == CALL_TOOL:
            params = body.get("params")
            if not isinstance(params, dict):
                params = {}
            tool_name = params.get("tool", params.get("name"))
            arguments = params.get("arguments")
            if arguments is None:
                arguments = {}

            token = self.auth.authenticate(authorization)
            result = await self.dispatcher.dispatch(tool_name, arguments, bearer_token=token)
            if result.error is not None:
                return error_response(result.error)
            return 200, result.to_content()

        raise MethodNotFoundError(method)
