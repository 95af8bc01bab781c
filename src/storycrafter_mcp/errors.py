"""
Error taxonomy for the StoryCrafter MCP server.

Every failure a tool call can produce maps to exactly one class here. Each
class carries the JSON-RPC error code and HTTP status used when the error is
rendered into a response envelope by :mod:`storycrafter_mcp.protocol`.
"""

from typing import Optional


PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
AUTHENTICATION_REQUIRED = -32001
CREDENTIAL_ERROR = -32002


class StoryCrafterError(Exception):
    """Base exception for all StoryCrafter MCP errors."""

    code: int = INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_error(self) -> dict:
        """Serialize to the ``error`` member of a response envelope."""
        return {"code": self.code, "message": self.message}


class ValidationError(StoryCrafterError):
    """Raised when tool arguments are missing or have the wrong shape."""

    code = INVALID_PARAMS
    status_code = 400

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class ParseError(StoryCrafterError):
    """Raised when the request body is not valid JSON."""

    code = PARSE_ERROR
    status_code = 400


class InvalidRequestError(StoryCrafterError):
    """Raised when the request body is JSON but not a request object."""

    code = INVALID_REQUEST
    status_code = 400


class MethodNotFoundError(StoryCrafterError):
    """Raised for an unknown protocol method.

    Routing misses are reported with HTTP 200 and an embedded error object.
    """

    code = METHOD_NOT_FOUND
    status_code = 200

    def __init__(self, method: Optional[str]):
        self.method = method
        super().__init__(f"Method not found: {method}")


class ToolNotFoundError(StoryCrafterError):
    """Raised for a ``tools/call`` naming a tool this server does not expose."""

    code = METHOD_NOT_FOUND
    status_code = 200

    def __init__(self, tool: Optional[str]):
        self.tool = tool
        super().__init__(f"Unknown tool: {tool}")


class CredentialError(StoryCrafterError):
    """Raised when AI provider credentials cannot be resolved from the registry."""

    code = CREDENTIAL_ERROR
    status_code = 500

    def __init__(self, message: str):
        super().__init__(f"Credential resolution failed: {message}")


class ProjectNotFoundError(CredentialError):
    """Raised when the registry has no project for the bearer token."""

    def __init__(self):
        super().__init__("project not found for the provided token")


class ConfigMissingError(CredentialError):
    """Raised when the project configuration has no AI provider section."""

    def __init__(self):
        super().__init__("project configuration has no ai_provider section")


class CredentialMissingError(CredentialError):
    """Raised when the selected provider has no API key configured."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"no API key configured for provider '{provider}'")


class RemoteError(StoryCrafterError):
    """Raised when the backend explicitly rejected the operation."""

    def __init__(self, detail: str, status_code: Optional[int] = None):
        self.detail = detail
        self.remote_status = status_code
        super().__init__(f"StoryCrafter service error: {detail}")


class BackendUnavailableError(StoryCrafterError):
    """Raised when the backend could not be reached or timed out."""

    def __init__(self, base_url: str):
        self.base_url = base_url
        super().__init__(f"StoryCrafter service unavailable: {base_url}")


class RegistryUnavailableError(BackendUnavailableError):
    """Raised when the project registry could not be reached or timed out."""

    def __init__(self, base_url: str):
        self.base_url = base_url
        StoryCrafterError.__init__(self, f"Project registry unavailable: {base_url}")


class RequestError(StoryCrafterError):
    """Raised for any other transport-level failure talking to the backend."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Request error: {detail}")
