"""
Tests for AI provider credential resolution.

Tests cover:
- Provider/model selection from per-task preferences
- API key lookup and the generic api_key fallback
- Registry lookup failures (not found, unreachable, bad response)
- Keys never appearing in repr
"""

import httpx
import pytest

from storycrafter_mcp.clients.registry import (
    EPIC_TASK,
    STORY_TASK,
    AIProviderSelection,
    CredentialResolver,
    select_provider,
)
from storycrafter_mcp.errors import (
    CREDENTIAL_ERROR,
    ConfigMissingError,
    CredentialError,
    CredentialMissingError,
    ProjectNotFoundError,
    RegistryUnavailableError,
)

REGISTRY_URL = "https://registry.test/api"


class TestSelectProvider:
    """Test provider selection from an ai_provider section."""

    def test_default_provider_without_preference(self):
        selection = select_provider({"anthropic_api_key": "sk-ant"}, EPIC_TASK)

        assert selection == AIProviderSelection(
            provider="anthropic",
            model="claude-sonnet-4-5-20250929",
            api_key="sk-ant",
        )

    def test_custom_default_model(self):
        selection = select_provider(
            {"anthropic_api_key": "sk-ant"}, EPIC_TASK, default_model="claude-opus"
        )

        assert selection.model == "claude-opus"

    def test_task_preference(self):
        ai_provider = {
            "openai_api_key": "sk-oa",
            "anthropic_api_key": "sk-ant",
            "preferences": {
                STORY_TASK: {"provider": "openai", "model": "gpt-4o"},
            },
        }

        stories = select_provider(ai_provider, STORY_TASK)
        epics = select_provider(ai_provider, EPIC_TASK)

        assert (stories.provider, stories.model, stories.api_key) == ("openai", "gpt-4o", "sk-oa")
        assert epics.provider == "anthropic"

    def test_preference_without_model_uses_provider_default(self):
        ai_provider = {
            "openrouter_api_key": "sk-or",
            "preferences": {EPIC_TASK: {"provider": "openrouter"}},
        }

        selection = select_provider(ai_provider, EPIC_TASK)

        assert selection.model == "anthropic/claude-sonnet-4.5"

    def test_generic_api_key_for_declared_provider(self):
        ai_provider = {"provider": "anthropic", "api_key": "sk-generic"}

        assert select_provider(ai_provider, EPIC_TASK).api_key == "sk-generic"

    def test_generic_api_key_ignored_for_other_provider(self):
        ai_provider = {
            "provider": "anthropic",
            "api_key": "sk-generic",
            "preferences": {EPIC_TASK: {"provider": "openai"}},
        }

        with pytest.raises(CredentialMissingError) as exc_info:
            select_provider(ai_provider, EPIC_TASK)

        assert exc_info.value.provider == "openai"

    def test_unsupported_provider(self):
        ai_provider = {"preferences": {EPIC_TASK: {"provider": "cohere"}}}

        with pytest.raises(CredentialError, match="unsupported provider 'cohere'"):
            select_provider(ai_provider, EPIC_TASK)

    def test_missing_key(self):
        with pytest.raises(CredentialMissingError, match="no API key configured for provider 'anthropic'"):
            select_provider({}, EPIC_TASK)

    def test_api_key_not_in_repr(self):
        selection = AIProviderSelection(provider="anthropic", model="m", api_key="sk-secret")

        assert "sk-secret" not in repr(selection)
        assert selection.to_dict() == {"provider": "anthropic", "model": "m", "apiKey": "sk-secret"}


class TestCredentialResolver:
    """Test registry lookups."""

    @pytest.fixture
    def resolver(self, stub):
        return CredentialResolver(REGISTRY_URL, transport=stub.transport)

    @pytest.mark.asyncio
    async def test_resolve_from_configs_section(self, stub, resolver):
        stub.respond(
            "/api/projects/proj-token",
            200,
            {"configs": {"ai_provider": {"anthropic_api_key": "sk-ant"}}},
        )

        selection = await resolver.resolve("proj-token", EPIC_TASK)

        assert selection.api_key == "sk-ant"
        assert stub.requests[0].method == "GET"
        assert str(stub.requests[0].url) == f"{REGISTRY_URL}/projects/proj-token"

    @pytest.mark.asyncio
    async def test_resolve_from_top_level_section(self, stub, resolver):
        stub.respond(
            "/api/projects/proj-token",
            200,
            {"ai_provider": {"openai_api_key": "sk-oa", "preferences": {STORY_TASK: {"provider": "openai"}}}},
        )

        selection = await resolver.resolve("proj-token", STORY_TASK)

        assert (selection.provider, selection.model) == ("openai", "gpt-5")

    @pytest.mark.asyncio
    async def test_project_not_found(self, stub, resolver):
        stub.respond("/api/projects/unknown", 404, {"error": "Not found"})

        with pytest.raises(ProjectNotFoundError) as exc_info:
            await resolver.resolve("unknown", EPIC_TASK)

        assert exc_info.value.code == CREDENTIAL_ERROR

    @pytest.mark.asyncio
    async def test_missing_ai_provider_section(self, stub, resolver):
        stub.respond("/api/projects/proj-token", 200, {"configs": {}})

        with pytest.raises(ConfigMissingError):
            await resolver.resolve("proj-token", EPIC_TASK)

    @pytest.mark.asyncio
    async def test_registry_server_error(self, stub, resolver):
        stub.respond("/api/projects/proj-token", 500, {"error": "db down"})

        with pytest.raises(CredentialError, match="HTTP 500"):
            await resolver.resolve("proj-token", EPIC_TASK)

    @pytest.mark.asyncio
    async def test_registry_unreachable(self, stub, resolver):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        stub.on("/api/projects/proj-token", refuse)

        with pytest.raises(RegistryUnavailableError, match=REGISTRY_URL):
            await resolver.resolve("proj-token", EPIC_TASK)

    @pytest.mark.asyncio
    async def test_registry_invalid_json(self, stub, resolver):
        stub.respond("/api/projects/proj-token", 200, "oops")

        with pytest.raises(CredentialError, match="invalid response"):
            await resolver.resolve("proj-token", EPIC_TASK)

    @pytest.mark.asyncio
    async def test_token_is_path_quoted(self, stub, resolver):
        stub.respond("/api/projects/a/b", 200, {})

        with pytest.raises(CredentialError):
            await resolver.resolve("a/b", EPIC_TASK)

        assert stub.requests[0].url.raw_path == b"/api/projects/a%2Fb"

    @pytest.mark.asyncio
    async def test_malformed_registry_url(self, stub):
        resolver = CredentialResolver("https://registry.test:notaport/api", transport=stub.transport)

        with pytest.raises(CredentialError, match="invalid registry URL"):
            await resolver.resolve("proj-token", EPIC_TASK)

        assert stub.requests == []
