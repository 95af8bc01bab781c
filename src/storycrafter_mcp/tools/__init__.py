"""
StoryCrafter tool definitions.

Each tool validates its arguments, transforms the project context into
backend format, and forwards the request to the generation backend.
"""

from .dispatcher import TOOL_ROUTES, ToolDispatcher, ToolRoute
from .schemas import (
    GENERATE_EPICS_SCHEMA,
    GENERATE_STORIES_SCHEMA,
    REGENERATE_EPIC_SCHEMA,
    REGENERATE_STORY_SCHEMA,
    TOOL_DESCRIPTORS,
    TOOL_NAMES,
)
from .validation import validate_arguments

__all__ = [
    "GENERATE_EPICS_SCHEMA",
    "GENERATE_STORIES_SCHEMA",
    "REGENERATE_EPIC_SCHEMA",
    "REGENERATE_STORY_SCHEMA",
    "TOOL_DESCRIPTORS",
    "TOOL_NAMES",
    "TOOL_ROUTES",
    "ToolDispatcher",
    "ToolRoute",
    "validate_arguments",
]
