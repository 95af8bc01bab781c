"""Tests for MCPServer and its native MCP tools."""

import json
from unittest.mock import patch

import pytest
from fastmcp.client import Client
from fastmcp.exceptions import ToolError
from starlette.applications import Starlette

from storycrafter_mcp.clients.backend import BackendClient
from storycrafter_mcp.config import StoryCrafterConfig
from storycrafter_mcp.server import MCPServer
from storycrafter_mcp.tools.dispatcher import ToolDispatcher

SERVICE_URL = "https://storycrafter.test"


@pytest.fixture
def mcp_server(stub):
    """An MCP server whose backend is the stub."""
    config = StoryCrafterConfig(transport="stdio", service_url=SERVICE_URL)
    dispatcher = ToolDispatcher(BackendClient(SERVICE_URL, transport=stub.transport))
    return MCPServer(config=config, dispatcher=dispatcher)


def test_server_initialization_default():
    """MCPServer builds its dispatcher and FastMCP app from defaults."""
    server = MCPServer()

    assert server.transport == "http"
    assert server.dispatcher is not None
    assert server.dispatcher.resolver is None
    assert server._app is not None


def test_server_auth_uses_project_token():
    config = StoryCrafterConfig(auth_required=True, project_token="proj-token")

    server = MCPServer(config=config)

    assert server._auth.required is True
    assert server._auth.authenticate(None) == "proj-token"
    assert server.dispatcher.resolver is not None


def test_http_app(mcp_server):
    assert isinstance(mcp_server.http_app(), Starlette)


def test_server_port_check():
    """Port 0 asks the OS for a free port, so binding succeeds."""
    server = MCPServer()
    assert server._check_port_available("127.0.0.1", 0)


class TestNativeTools:
    """Test tools over the in-memory FastMCP client."""

    @pytest.mark.asyncio
    async def test_tools_registered(self, mcp_server):
        async with Client(mcp_server._app) as client:
            tools = await client.list_tools()

        assert sorted(t.name for t in tools) == [
            "generate_epics",
            "generate_stories",
            "regenerate_epic",
            "regenerate_story",
        ]

    @pytest.mark.asyncio
    async def test_generate_epics(self, stub, mcp_server, taskmaster_context):
        stub.respond("/generate-epics", 200, {"success": True, "epics": [{"id": 1}]})

        async with Client(mcp_server._app) as client:
            result = await client.call_tool(
                "generate_epics",
                {"project_context": taskmaster_context},
            )

        data = json.loads(result.content[0].text)
        assert data["epics"] == [{"id": 1}]
        assert data["metadata"]["tool"] == "generate_epics"
        assert stub.sent_json()["consensus_messages"][0]["role"] == "system"

    @pytest.mark.asyncio
    async def test_regenerate_story(self, stub, mcp_server, taskmaster_context):
        stub.respond("/regenerate-story", 200, {"success": True, "story": {"id": "1.1"}})

        async with Client(mcp_server._app) as client:
            result = await client.call_tool(
                "regenerate_story",
                {
                    "project_context": taskmaster_context,
                    "epic": {"id": 1},
                    "story": {"id": "1.1"},
                    "user_feedback": "Add acceptance criteria",
                },
            )

        assert json.loads(result.content[0].text)["story"] == {"id": "1.1"}
        assert stub.sent_json()["user_feedback"] == "Add acceptance criteria"

    @pytest.mark.asyncio
    async def test_backend_error_raises_tool_error(self, stub, mcp_server, taskmaster_context):
        stub.respond("/generate-epics", 500, {"success": False, "error": "boom"})

        async with Client(mcp_server._app) as client:
            with pytest.raises(ToolError, match="boom"):
                await client.call_tool(
                    "generate_epics",
                    {"project_context": taskmaster_context},
                )

    @pytest.mark.asyncio
    async def test_validation_error_raises_tool_error(self, stub, mcp_server):
        async with Client(mcp_server._app) as client:
            with pytest.raises(ToolError, match="project_summary and final_decisions"):
                await client.call_tool(
                    "generate_epics",
                    {"project_context": {"project_summary": {}}},
                )

        assert stub.requests == []

    @pytest.mark.asyncio
    async def test_auth_required_without_token(self, stub):
        config = StoryCrafterConfig(transport="stdio", auth_required=True)
        server = MCPServer(config=config)

        async with Client(server._app) as client:
            with pytest.raises(ToolError, match="Authentication required"):
                await client.call_tool(
                    "generate_epics",
                    {"project_context": {"project_summary": {}, "final_decisions": {}}},
                )


class TestServerStart:
    """Test transport selection in start()."""

    def test_start_stdio(self, mcp_server):
        with patch.object(mcp_server._app, "run") as mock_run:
            mcp_server.start()

        mock_run.assert_called_once_with()

    def test_start_http_runs_uvicorn(self):
        server = MCPServer(config=StoryCrafterConfig(host="127.0.0.1", port=8123))

        with patch.object(server, "_check_port_available", return_value=True), \
                patch("storycrafter_mcp.server.uvicorn.run") as mock_uvicorn:
            server.start()

        args, kwargs = mock_uvicorn.call_args
        assert isinstance(args[0], Starlette)
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 8123

    def test_start_sse(self):
        server = MCPServer(config=StoryCrafterConfig(transport="sse", port=8124))

        with patch.object(server, "_check_port_available", return_value=True), \
                patch.object(server._app, "run") as mock_run:
            server.start()

        mock_run.assert_called_once_with(transport="sse", host="127.0.0.1", port=8124)

    def test_start_port_in_use(self):
        server = MCPServer()

        with patch.object(server, "_check_port_available", return_value=False):
            with pytest.raises(RuntimeError, match="Port 8000 already in use"):
                server.start()

    def test_start_failure_wrapped(self):
        server = MCPServer()

        with patch.object(server, "_check_port_available", return_value=True), \
                patch("storycrafter_mcp.server.uvicorn.run", side_effect=OSError("boom")):
            with pytest.raises(RuntimeError, match="Failed to start MCP server"):
                server.start()
