"""
Optional bearer token authentication for tool calls.

When enabled, the token identifies the caller's project in the project
registry, from which AI provider credentials are resolved.
"""

from .bearer import (
    AuthenticationError,
    BearerAuth,
    extract_bearer_token,
)

__all__ = [
    "AuthenticationError",
    "BearerAuth",
    "extract_bearer_token",
]
