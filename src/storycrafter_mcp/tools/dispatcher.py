"""
Tool dispatch for the four StoryCrafter operations.

Every handler runs the same pipeline:

    validate -> transform -> (resolve credentials) -> backend call -> wrap

and returns a ToolResult instead of raising, so the protocol layer is the
only place that decides how an error is rendered.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

import httpx

from storycrafter_mcp.auth import AuthenticationError
from storycrafter_mcp.clients.backend import BackendClient
from storycrafter_mcp.clients.registry import EPIC_TASK, STORY_TASK, CredentialResolver
from storycrafter_mcp.config import DEFAULT_TIMEOUTS, StoryCrafterConfig
from storycrafter_mcp.errors import StoryCrafterError, ToolNotFoundError
from storycrafter_mcp.results import ToolResult
from storycrafter_mcp.transform import transform_project_context

from .schemas import TOOL_DESCRIPTORS
from .validation import validate_arguments

logger = logging.getLogger(__name__)


def _epics_body(arguments: Mapping[str, Any]) -> Dict[str, Any]:
    return {}


def _stories_body(arguments: Mapping[str, Any]) -> Dict[str, Any]:
    # The backend expands one epic per call.
    epics = arguments["epics"]
    return {"epic": epics[0]} if epics else {}


def _regenerate_epic_body(arguments: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "epic": arguments["epic"],
        "user_feedback": arguments["user_feedback"],
    }


def _regenerate_story_body(arguments: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "epic": arguments["epic"],
        "story": arguments["story"],
        "user_feedback": arguments["user_feedback"],
    }


@dataclass(frozen=True)
class ToolRoute:
    """Backend routing for one tool."""

    name: str
    path: str
    result_key: str
    task_name: str
    failure_message: str
    build_body: Callable[[Mapping[str, Any]], Dict[str, Any]]


TOOL_ROUTES: Dict[str, ToolRoute] = {
    route.name: route
    for route in (
        ToolRoute(
            name="generate_epics",
            path="/generate-epics",
            result_key="epics",
            task_name=EPIC_TASK,
            failure_message="Epic generation failed",
            build_body=_epics_body,
        ),
        ToolRoute(
            name="generate_stories",
            path="/generate-stories",
            result_key="stories",
            task_name=STORY_TASK,
            failure_message="Story generation failed",
            build_body=_stories_body,
        ),
        ToolRoute(
            name="regenerate_epic",
            path="/regenerate-epic",
            result_key="epic",
            task_name=EPIC_TASK,
            failure_message="Epic regeneration failed",
            build_body=_regenerate_epic_body,
        ),
        ToolRoute(
            name="regenerate_story",
            path="/regenerate-story",
            result_key="story",
            task_name=STORY_TASK,
            failure_message="Story regeneration failed",
            build_body=_regenerate_story_body,
        ),
    )
}


class ToolDispatcher:
    """Routes tool calls to the StoryCrafter backend."""

    def __init__(
        self,
        backend: BackendClient,
        timeouts: Optional[Mapping[str, float]] = None,
        resolver: Optional[CredentialResolver] = None,
    ):
        """
        Initialize dispatcher.

        Args:
            backend: Client for the generation backend
            timeouts: Backend timeout in seconds per tool name
            resolver: Credential resolver. When set, every call needs a
                bearer token and the resolved provider is sent to the backend.
        """
        self.backend = backend
        self.timeouts = dict(DEFAULT_TIMEOUTS)
        self.timeouts.update(timeouts or {})
        self.resolver = resolver

    @classmethod
    def from_config(
        cls,
        config: StoryCrafterConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ToolDispatcher":
        """Build a dispatcher, and its clients, from configuration."""
        resolver = None
        if config.auth_required:
            resolver = CredentialResolver(
                config.registry_url,
                timeout=config.registry_timeout,
                default_model=config.default_model,
                transport=transport,
            )
        return cls(
            backend=BackendClient(config.service_url, transport=transport),
            timeouts=config.timeouts,
            resolver=resolver,
        )

    @staticmethod
    def list_tools() -> List[Dict[str, Any]]:
        """Return the static tool descriptors. Never touches the network."""
        return copy.deepcopy(TOOL_DESCRIPTORS)

    @staticmethod
    def tool_names() -> List[str]:
        return list(TOOL_ROUTES)

    async def dispatch(
        self,
        tool_name: Optional[str],
        arguments: Any,
        bearer_token: Optional[str] = None,
    ) -> ToolResult:
        """
        Run a tool call.

        Args:
            tool_name: Name of the tool to call
            arguments: Tool arguments
            bearer_token: Caller's bearer token, if any

        Returns:
            ToolResult with the wrapped backend response or the error
        """
        route = TOOL_ROUTES.get(tool_name) if isinstance(tool_name, str) else None
        if route is None:
            logger.info(f"Unknown tool requested: {tool_name}")
            return ToolResult.error_result(str(tool_name), ToolNotFoundError(tool_name))

        try:
            payload = await self._run(route, arguments, bearer_token)
        except StoryCrafterError as e:
            logger.info(f"{route.name} failed: {type(e).__name__}: {e.message}")
            return ToolResult.error_result(route.name, e)

        return ToolResult.success_result(route.name, payload)

    async def _run(
        self,
        route: ToolRoute,
        arguments: Any,
        bearer_token: Optional[str],
    ) -> Dict[str, Any]:
        validate_arguments(route.name, arguments)

        transformed = transform_project_context(arguments["project_context"])
        body = route.build_body(arguments)
        body.update(transformed.to_payload())

        if self.resolver is not None:
            if not bearer_token:
                raise AuthenticationError()
            selection = await self.resolver.resolve(bearer_token, route.task_name)
            body["ai_provider"] = selection.to_dict()

        logger.info(
            f"{route.name}: forwarding {len(transformed.messages)} consensus messages"
        )
        response = await self.backend.call(
            route.path,
            body,
            timeout=self.timeouts[route.name],
            failure_message=route.failure_message,
        )

        metadata = response.get("metadata")
        merged = dict(metadata) if isinstance(metadata, Mapping) else {}
        merged["tool"] = route.name

        return {
            "success": True,
            route.result_key: response.get(route.result_key),
            "metadata": merged,
        }
