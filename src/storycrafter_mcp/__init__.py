"""
StoryCrafter MCP: AI backlog generation for VISHKAR consensus discussions.

Exposes tools that turn a VISHKAR project context into epics and user
stories by forwarding to the StoryCrafter generation backend.

Architecture:
- server.py: Server with HTTP (/mcp), stdio and SSE transports
- http_app.py: Starlette app for the JSON /mcp endpoint
- protocol.py: tools/list and tools/call handling, error rendering
- config.py: Configuration from YAML file and environment
- transform.py: VISHKAR context -> consensus messages + metadata
- tools/: Tool schemas, argument validation and dispatch
- clients/: Backend and project registry HTTP clients
- auth/: Optional bearer token handling
"""

__version__ = "1.0.0"

__all__ = ["MCPServer", "StoryCrafterConfig", "__version__"]

from .config import StoryCrafterConfig
from .server import MCPServer
