"""
Bearer token handling for tool calls.

The token is not verified here. It is passed through to the project
registry, which is the only party that knows whether it names a project.
"""

import logging
from typing import Optional

from storycrafter_mcp.errors import AUTHENTICATION_REQUIRED, StoryCrafterError

logger = logging.getLogger(__name__)


class AuthenticationError(StoryCrafterError):
    """Raised when a tool call requires a bearer token and none was sent."""

    code = AUTHENTICATION_REQUIRED
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Extract the token from an ``Authorization: Bearer <token>`` header value.

    Args:
        authorization: Raw header value, or None if the header is absent

    Returns:
        The token, or None if the header is absent, empty, or not a Bearer header
    """
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


class BearerAuth:
    """
    Decides whether a tool call carries the bearer token it needs.

    Example:
        auth = BearerAuth(required=True)
        token = auth.authenticate(request.headers.get("Authorization"))
    """

    def __init__(self, required: bool = False, fallback_token: Optional[str] = None):
        """
        Initialize bearer authentication.

        Args:
            required: Whether tool calls must carry a bearer token
            fallback_token: Token used when the transport has no headers
                (stdio), typically from configuration
        """
        self.required = required
        self.fallback_token = fallback_token

    def authenticate(self, authorization: Optional[str] = None) -> Optional[str]:
        """
        Return the bearer token for a call.

        Args:
            authorization: Raw ``Authorization`` header value

        Returns:
            The token, or None when authentication is not required and no
            token was sent

        Raises:
            AuthenticationError: If a token is required and none is available
        """
        token = extract_bearer_token(authorization) or self.fallback_token
        if self.required and not token:
            logger.warning("Authentication failed: No bearer token provided")
            raise AuthenticationError(
                "Authentication required. Send an 'Authorization: Bearer <token>' "
                "header with your project registry API key."
            )
        return token if self.required else None

    def log_status(self, logger_instance: logging.Logger) -> None:
        """
        Log authentication status to the provided logger.

        Args:
            logger_instance: Logger to write status to
        """
        if self.required:
            logger_instance.info("Bearer token required (credentials resolved from project registry)")
        else:
            logger_instance.info("Authentication disabled (backend uses its own API keys)")
