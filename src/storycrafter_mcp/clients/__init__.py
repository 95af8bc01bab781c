"""
Outbound HTTP clients.

- backend.py: StoryCrafter generation backend
- registry.py: Project registry lookups for AI provider credentials
"""

from .backend import BackendClient
from .registry import (
    AIProviderSelection,
    CredentialResolver,
    EPIC_TASK,
    STORY_TASK,
    select_provider,
)

__all__ = [
    "AIProviderSelection",
    "BackendClient",
    "CredentialResolver",
    "EPIC_TASK",
    "STORY_TASK",
    "select_provider",
]
