"""
Publishing this service to the central MCP registry.

After a deployment the service descriptor (name, URL, transport, auth mode
and tools) is posted to the registry so MCP clients can discover it.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from storycrafter_mcp.config import StoryCrafterConfig
from storycrafter_mcp.protocol import SERVICE_NAME
from storycrafter_mcp.tools.schemas import TOOL_DESCRIPTORS

logger = logging.getLogger(__name__)


SERVICE_KEY = "storycrafter"
REGISTRY_UPDATE_PATH = "/api/registry/update"
MCP_ENDPOINT_PATH = "/api/mcp"

SERVICE_DESCRIPTION = (
    "AI-powered backlog generator for VISHKAR 3-agent consensus discussions. "
    "Generates epics and detailed user stories with acceptance criteria, "
    "technical tasks, and estimates, and regenerates individual epics or "
    "stories from user feedback."
)


class RegistryUpdateError(Exception):
    """Raised when the MCP registry rejects or cannot receive an update."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def build_service_descriptor(config: StoryCrafterConfig) -> Dict[str, Any]:
    """Build the descriptor published to the registry."""
    if config.auth_required:
        authentication = {
            "type": "bearer",
            "note": "Project registry API key in the Authorization header",
        }
    else:
        authentication = {
            "type": "none",
            "note": "No authentication required (service handles its own API keys)",
        }

    return {
        "serviceKey": SERVICE_KEY,
        "serviceName": SERVICE_NAME,
        "url": config.public_url,
        "description": SERVICE_DESCRIPTION,
        "transport": "http",
        "authentication": authentication,
        "tools": [
            {
                "name": tool["name"],
                "description": tool["description"],
                "endpoint": MCP_ENDPOINT_PATH,
                "method": "POST",
            }
            for tool in TOOL_DESCRIPTORS
        ],
    }


def publish_service(
    config: StoryCrafterConfig,
    transport: Optional[httpx.BaseTransport] = None,
    timeout: float = 30.0,
) -> Dict[str, Any]:
    """
    Post the service descriptor to the MCP registry.

    Args:
        config: Configuration holding the registry URL and update token
        transport: Optional httpx transport, used to stub the registry in tests
        timeout: Request timeout in seconds

    Returns:
        Registry response body

    Raises:
        RegistryUpdateError: Missing token, unreachable registry, or rejected update
    """
    if not config.registry_update_token:
        raise RegistryUpdateError(
            "REGISTRY_UPDATE_TOKEN environment variable is required"
        )

    url = f"{config.registry_api_url.rstrip('/')}{REGISTRY_UPDATE_PATH}"
    descriptor = build_service_descriptor(config)
    logger.info(f"Updating MCP registry for {SERVICE_NAME} at {url}")

    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            response = client.post(
                url,
                json=descriptor,
                headers={"Authorization": f"Bearer {config.registry_update_token}"},
            )
    except httpx.HTTPError as e:
        raise RegistryUpdateError(f"Request failed: {e}") from e

    try:
        data = response.json()
    except ValueError as e:
        raise RegistryUpdateError(
            f"Failed to parse response: {response.text[:200]}",
            status_code=response.status_code,
        ) from e

    if response.status_code != 200 or not isinstance(data, dict) or not data.get("success"):
        error = data.get("error") if isinstance(data, dict) else None
        message = data.get("message") if isinstance(data, dict) else None
        raise RegistryUpdateError(
            f"Registry update failed: {error or 'Unknown error'} ({message or 'No message'})",
            status_code=response.status_code,
        )

    return data
