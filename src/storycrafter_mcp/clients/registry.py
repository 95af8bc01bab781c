"""
AI provider credential resolution through the project registry.

A caller's bearer token identifies a project in the registry. The registry
returns the project's configuration with credential fields already
decrypted; this module picks the provider, model and API key to use for a
given generation task.

API keys are never logged. They live only in the AIProviderSelection
returned to the caller.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import httpx

from storycrafter_mcp.errors import (
    ConfigMissingError,
    CredentialError,
    CredentialMissingError,
    ProjectNotFoundError,
    RegistryUnavailableError,
)

logger = logging.getLogger(__name__)


EPIC_TASK = "epic_generation"
STORY_TASK = "story_generation"

DEFAULT_PROVIDER = "anthropic"

PROVIDER_KEY_FIELDS = {
    "anthropic": "anthropic_api_key",
    "openai": "openai_api_key",
    "openrouter": "openrouter_api_key",
}

PROVIDER_DEFAULT_MODELS = {
    "anthropic": "claude-sonnet-4-5-20250929",
    "openai": "gpt-5",
    "openrouter": "anthropic/claude-sonnet-4.5",
}


@dataclass(frozen=True)
class AIProviderSelection:
    """Provider, model and API key chosen for one generation task."""

    provider: str
    model: str
    api_key: str = field(repr=False)

    def to_dict(self) -> Dict[str, str]:
        """Serialize for the ``ai_provider`` field of a backend request."""
        return {"provider": self.provider, "model": self.model, "apiKey": self.api_key}


def select_provider(
    ai_provider: Mapping[str, Any],
    task_name: str,
    default_model: str = PROVIDER_DEFAULT_MODELS[DEFAULT_PROVIDER],
) -> AIProviderSelection:
    """
    Pick provider, model and API key for ``task_name`` from an ai_provider section.

    The ``preferences`` sub-record maps task names to ``{provider, model}``.
    Tasks without a preference use the anthropic provider and
    ``default_model``.

    Raises:
        CredentialError: Preference names an unsupported provider
        CredentialMissingError: Selected provider has no API key
    """
    preferences = ai_provider.get("preferences") or {}
    preference = preferences.get(task_name) if isinstance(preferences, Mapping) else None

    if isinstance(preference, Mapping) and preference.get("provider"):
        provider = str(preference["provider"]).lower()
        if provider not in PROVIDER_KEY_FIELDS:
            raise CredentialError(
                f"unsupported provider '{provider}' for task '{task_name}'"
            )
        model = preference.get("model") or PROVIDER_DEFAULT_MODELS[provider]
    else:
        provider = DEFAULT_PROVIDER
        model = default_model

    api_key = ai_provider.get(PROVIDER_KEY_FIELDS[provider])
    if not api_key and ai_provider.get("provider") == provider:
        api_key = ai_provider.get("api_key")
    if not api_key:
        raise CredentialMissingError(provider)

    return AIProviderSelection(provider=provider, model=model, api_key=api_key)


class CredentialResolver:
    """Resolves bearer tokens to AI provider selections via the project registry."""

    def __init__(
        self,
        registry_url: str,
        timeout: float = 10.0,
        default_model: str = PROVIDER_DEFAULT_MODELS[DEFAULT_PROVIDER],
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.registry_url = registry_url.rstrip("/")
        self.timeout = timeout
        self.default_model = default_model
        self._transport = transport

    async def fetch_project(self, token: str) -> Dict[str, Any]:
        """
        Fetch the project configuration registered for ``token``.

        Raises:
            RegistryUnavailableError: Registry unreachable or timed out
            ProjectNotFoundError: No project for the token
            CredentialError: Registry rejected the lookup, sent garbage, or the URL is malformed
        """
        url = f"{self.registry_url}/projects/{quote(token, safe='')}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            logger.warning(f"Project registry unreachable: {type(e).__name__}")
            raise RegistryUnavailableError(self.registry_url) from e
        except httpx.InvalidURL as e:
            raise CredentialError(f"invalid registry URL: {e}") from e

        if response.status_code == 404:
            raise ProjectNotFoundError()
        if response.is_error:
            raise CredentialError(
                f"registry returned HTTP {response.status_code}"
            )

        try:
            project = response.json()
        except ValueError as e:
            raise CredentialError("registry returned an invalid response") from e
        if not isinstance(project, dict):
            raise CredentialError("registry returned an invalid response")
        return project

    async def resolve(self, token: str, task_name: str) -> AIProviderSelection:
        """
        Resolve the AI provider selection for ``task_name``.

        Args:
            token: Caller's bearer token
            task_name: Generation task ("epic_generation" or "story_generation")

        Returns:
            AIProviderSelection for the task
        """
        project = await self.fetch_project(token)

        configs = project.get("configs")
        ai_provider = configs.get("ai_provider") if isinstance(configs, Mapping) else None
        if ai_provider is None:
            ai_provider = project.get("ai_provider")
        if not isinstance(ai_provider, Mapping):
            raise ConfigMissingError()

        selection = select_provider(ai_provider, task_name, self.default_model)
        logger.info(
            f"Resolved AI provider for {task_name}: {selection.provider}/{selection.model}"
        )
        return selection
