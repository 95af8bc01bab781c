"""
StoryCrafter MCP server.

Serves the four StoryCrafter tools over one of three transports:

- http: the JSON ``/mcp`` endpoint (Starlette app run by uvicorn)
- stdio: native MCP over stdin/stdout via FastMCP
- sse: native MCP over Server-Sent Events via FastMCP
"""

import logging
import socket
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import uvicorn
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.server.dependencies import get_http_headers

from storycrafter_mcp.auth import AuthenticationError, BearerAuth
from storycrafter_mcp.config import StoryCrafterConfig
from storycrafter_mcp.http_app import create_app
from storycrafter_mcp.protocol import SERVICE_NAME
from storycrafter_mcp.tools.dispatcher import ToolDispatcher
from storycrafter_mcp.tools.schemas import TOOL_DESCRIPTORS

logger = logging.getLogger(__name__)


@dataclass
class MCPServer:
    """
    Main server instance for StoryCrafter MCP.

    Attributes:
        config: Server configuration
        dispatcher: Tool dispatcher shared by all transports
    """

    config: StoryCrafterConfig = field(default_factory=StoryCrafterConfig)
    dispatcher: Optional[ToolDispatcher] = None
    _app: Optional[FastMCP] = field(default=None, init=False, repr=False)
    _auth: Optional[BearerAuth] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        """Build dispatcher and FastMCP app after initialization."""
        if self.dispatcher is None:
            self.dispatcher = ToolDispatcher.from_config(self.config)

        self._auth = BearerAuth(
            required=self.config.auth_required,
            fallback_token=self.config.project_token,
        )

        self._app = FastMCP(SERVICE_NAME)
        self._register_tools()

    @property
    def transport(self) -> str:
        return self.config.transport

    def _check_port_available(self, host: str, port: int) -> bool:
        """
        Check if port is available for binding.

        Args:
            host: Host address to check
            port: Port number to check

        Returns:
            True if port is available, False otherwise
        """
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                s.bind((host, port))
                return True
        except OSError:
            return False

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run a tool for a native MCP client.

        The bearer token comes from the HTTP headers when the transport has
        them (sse), otherwise from the configured project token.

        Raises:
            ToolError: If the tool call failed
        """
        headers = get_http_headers(include_all=True)
        try:
            token = self._auth.authenticate(headers.get("authorization"))
        except AuthenticationError as e:
            raise ToolError(e.message) from e

        result = await self.dispatcher.dispatch(name, arguments, bearer_token=token)
        if result.error is not None:
            raise ToolError(result.error.message)
        return result.unwrap()

    def _register_tools(self):
        """Register all StoryCrafter tools with the FastMCP app."""
        descriptions = {tool["name"]: tool["description"] for tool in TOOL_DESCRIPTORS}

        async def generate_epics(project_context: Dict[str, Any]) -> Dict[str, Any]:
            return await self.call_tool(
                "generate_epics",
                {"project_context": project_context},
            )

        async def generate_stories(
            project_context: Dict[str, Any],
            epics: List[Dict[str, Any]],
        ) -> Dict[str, Any]:
            return await self.call_tool(
                "generate_stories",
                {"project_context": project_context, "epics": epics},
            )

        async def regenerate_epic(
            project_context: Dict[str, Any],
            epic: Dict[str, Any],
            user_feedback: str,
        ) -> Dict[str, Any]:
            return await self.call_tool(
                "regenerate_epic",
                {
                    "project_context": project_context,
                    "epic": epic,
                    "user_feedback": user_feedback,
                },
            )

        async def regenerate_story(
            project_context: Dict[str, Any],
            epic: Dict[str, Any],
            story: Dict[str, Any],
            user_feedback: str,
        ) -> Dict[str, Any]:
            return await self.call_tool(
                "regenerate_story",
                {
                    "project_context": project_context,
                    "epic": epic,
                    "story": story,
                    "user_feedback": user_feedback,
                },
            )

        for handler in (generate_epics, generate_stories, regenerate_epic, regenerate_story):
            self.register_tool(
                name=handler.__name__,
                description=descriptions[handler.__name__],
                handler=handler,
            )

    def register_tool(self, name: str, description: str, handler):
        """
        Register an MCP tool with the server.

        Args:
            name: Tool name (e.g., "generate_epics")
            description: Human-readable tool description
            handler: Callable that executes the tool operation
        """
        if not self._app:
            raise RuntimeError("FastMCP app not initialized")

        self._app.tool(name=name, description=description)(handler)
        logger.debug(f"Registered {name} tool with MCP server")

    def http_app(self):
        """Return the Starlette app serving the JSON ``/mcp`` endpoint."""
        return create_app(self.config, self.dispatcher)

    def start(self):
        """
        Start the server with the configured transport.

        Raises:
            RuntimeError: If the port is unavailable or the server fails to start
        """
        if not self._app:
            raise RuntimeError("FastMCP app not initialized. This should not happen.")

        self._auth.log_status(logger)
        logger.info(f"Forwarding tool calls to {self.config.service_url}")

        if self.transport == "stdio":
            try:
                self._app.run()
            except Exception as e:
                raise RuntimeError(f"Failed to start MCP server with stdio transport: {e}") from e
            return

        host, port = self.config.host, self.config.port
        if not self._check_port_available(host, port):
            raise RuntimeError(
                f"Port {port} already in use. "
                f"Choose a different port or stop the conflicting service."
            )

        try:
            if self.transport == "sse":
                self._app.run(transport="sse", host=host, port=port)
            else:
                uvicorn.run(self.http_app(), host=host, port=port, log_config=None)
        except Exception as e:
            raise RuntimeError(f"Failed to start MCP server on {host}:{port}: {e}") from e
