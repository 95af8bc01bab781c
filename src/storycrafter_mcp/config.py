"""
StoryCrafter MCP server configuration.

Configuration is built once at process start by :meth:`StoryCrafterConfig.load`
and passed explicitly to the server, dispatcher and clients. Values come from
an optional YAML file (``storycrafter.yaml``) with environment variables
taking precedence over the file.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml


DEFAULT_CONFIG_FILE = "storycrafter.yaml"
DEFAULT_SERVICE_URL = "https://storycrafter-service.vercel.app"
DEFAULT_REGISTRY_URL = "https://project-registry-henna.vercel.app/api"
DEFAULT_REGISTRY_API_URL = "https://enhanced-context-mcp.vercel.app"
DEFAULT_PUBLIC_URL = "https://storycrafter-mcp.vercel.app"

DEFAULT_TIMEOUTS: Dict[str, float] = {
    "generate_epics": 60.0,
    "generate_stories": 600.0,
    "regenerate_epic": 60.0,
    "regenerate_story": 180.0,
}
"""Per-tool backend timeouts in seconds. Story generation is an order of
magnitude slower than epic generation."""

VALID_TRANSPORTS = ("stdio", "sse", "http")


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


def _env_number(name: str, cast):
    raw = os.environ[name]
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(
            f"Invalid {name}: {raw}. Must be a number."
        )


@dataclass
class StoryCrafterConfig:
    """
    Runtime configuration for the StoryCrafter MCP server.

    Attributes:
        host: Server bind address for network transports
        port: Server port for network transports
        transport: "http" (JSON endpoint), "sse" or "stdio" (native MCP)
        service_url: Base URL of the StoryCrafter generation backend
        registry_url: Base URL of the project registry used for credentials
        auth_required: Require a bearer token on tools/call and resolve
            AI provider credentials from the registry
        project_token: Bearer token used by the stdio transport, where no
            HTTP headers exist
        registry_api_url: MCP registry that lists this service
        registry_update_token: Token for publishing to the MCP registry
        public_url: URL this service is reachable at, as published
        timeouts: Backend timeout in seconds, per tool
        registry_timeout: Project registry timeout in seconds
        default_model: Model used when a project has no per-task preference
        log_level: Logging level name
    """

    host: str = "127.0.0.1"
    port: int = 8000
    transport: Literal["stdio", "sse", "http"] = "http"
    service_url: str = DEFAULT_SERVICE_URL
    registry_url: str = DEFAULT_REGISTRY_URL
    auth_required: bool = False
    project_token: Optional[str] = None
    registry_api_url: str = DEFAULT_REGISTRY_API_URL
    registry_update_token: Optional[str] = None
    public_url: str = DEFAULT_PUBLIC_URL
    timeouts: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_TIMEOUTS))
    registry_timeout: float = 10.0
    default_model: str = "claude-sonnet-4-5-20250929"
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.transport not in VALID_TRANSPORTS:
            raise ValueError(
                f"Invalid transport '{self.transport}'. "
                "Must be 'stdio', 'sse' or 'http'."
            )
        unknown = set(self.timeouts) - set(DEFAULT_TIMEOUTS)
        if unknown:
            raise ValueError(f"Unknown tools in timeouts: {', '.join(sorted(unknown))}")
        merged = dict(DEFAULT_TIMEOUTS)
        merged.update({k: float(v) for k, v in self.timeouts.items()})
        self.timeouts = merged
        self.service_url = self.service_url.rstrip("/")
        self.registry_url = self.registry_url.rstrip("/")

    def timeout_for(self, tool_name: str) -> float:
        """Return the backend timeout in seconds for ``tool_name``."""
        return self.timeouts[tool_name]

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> "StoryCrafterConfig":
        """
        Load configuration from a YAML file and the environment.

        Falls back to defaults if the file doesn't exist. Environment
        variables override config file values.

        Args:
            config_file: Path to the YAML file. Defaults to
                ``$STORYCRAFTER_CONFIG`` or ``./storycrafter.yaml``.

        Returns:
            StoryCrafterConfig instance with loaded/default values

        Raises:
            ValueError: If the config file or an environment value is invalid
        """
        if config_file is None:
            config_file = Path(os.environ.get("STORYCRAFTER_CONFIG", DEFAULT_CONFIG_FILE))

        config_dict: Dict[str, Any] = {}
        if config_file.exists():
            try:
                with open(config_file) as f:
                    config_dict = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid {config_file.name}: {e}") from e
            if not isinstance(config_dict, dict):
                raise ValueError(f"Invalid {config_file.name}: top level must be a mapping")

        string_vars = {
            "MCP_SERVER_HOST": "host",
            "MCP_SERVER_TRANSPORT": "transport",
            "STORYCRAFTER_SERVICE_URL": "service_url",
            "STORYCRAFTER_REGISTRY_URL": "registry_url",
            "STORYCRAFTER_PROJECT_TOKEN": "project_token",
            "REGISTRY_API_URL": "registry_api_url",
            "REGISTRY_UPDATE_TOKEN": "registry_update_token",
            "STORYCRAFTER_DEFAULT_MODEL": "default_model",
            "STORYCRAFTER_LOG_LEVEL": "log_level",
        }
        for env_name, key in string_vars.items():
            if env_name in os.environ:
                config_dict[key] = os.environ[env_name]

        if "MCP_SERVER_PORT" in os.environ:
            try:
                config_dict["port"] = int(os.environ["MCP_SERVER_PORT"])
            except ValueError:
                raise ValueError(
                    f"Invalid MCP_SERVER_PORT: {os.environ['MCP_SERVER_PORT']}. "
                    "Must be an integer."
                )

        if "STORYCRAFTER_AUTH_REQUIRED" in os.environ:
            config_dict["auth_required"] = _env_bool(os.environ["STORYCRAFTER_AUTH_REQUIRED"])

        if "STORYCRAFTER_PUBLIC_URL" in os.environ:
            config_dict["public_url"] = os.environ["STORYCRAFTER_PUBLIC_URL"]
        elif "VERCEL_URL" in os.environ:
            config_dict["public_url"] = f"https://{os.environ['VERCEL_URL']}"

        if "STORYCRAFTER_REGISTRY_TIMEOUT" in os.environ:
            config_dict["registry_timeout"] = _env_number("STORYCRAFTER_REGISTRY_TIMEOUT", float)

        timeouts = dict(config_dict.get("timeouts") or {})
        for tool_name in DEFAULT_TIMEOUTS:
            env_name = f"STORYCRAFTER_TIMEOUT_{tool_name.upper()}"
            if env_name in os.environ:
                timeouts[tool_name] = _env_number(env_name, float)
        config_dict["timeouts"] = timeouts

        return cls(**{k: v for k, v in config_dict.items() if k in cls.__annotations__})

    def redacted(self) -> Dict[str, Any]:
        """Return configuration values with secrets redacted."""
        values = {
            "host": self.host,
            "port": self.port,
            "transport": self.transport,
            "service_url": self.service_url,
            "registry_url": self.registry_url,
            "auth_required": self.auth_required,
            "registry_api_url": self.registry_api_url,
            "public_url": self.public_url,
            "timeouts": dict(self.timeouts),
            "registry_timeout": self.registry_timeout,
            "default_model": self.default_model,
            "log_level": self.log_level,
        }
        if self.project_token:
            values["project_token"] = "***REDACTED***"
        if self.registry_update_token:
            values["registry_update_token"] = "***REDACTED***"
        return values
