"""
Argument validation for StoryCrafter tools.

Validation is pure and runs before any transformation or network call, so a
badly shaped request never reaches the backend or the registry.
"""

from typing import Any, Callable, Dict, Mapping

from storycrafter_mcp.errors import ValidationError
from storycrafter_mcp.transform import pick_field


def _require_object(arguments: Mapping[str, Any], field: str) -> Mapping[str, Any]:
    value = arguments.get(field)
    if not isinstance(value, Mapping):
        raise ValidationError(field, f"{field} is required and must be an object")
    return value


def _require_array(arguments: Mapping[str, Any], field: str) -> None:
    if not isinstance(arguments.get(field), list):
        raise ValidationError(field, f"{field} is required and must be an array")


def _require_text(arguments: Mapping[str, Any], field: str) -> None:
    value = arguments.get(field)
    if not isinstance(value, str) or not value:
        raise ValidationError(field, f"{field} is required and must be a non-empty string")


def _require_context_sections(project_context: Mapping[str, Any]) -> None:
    summary = pick_field(project_context, "project_summary", "projectSummary")
    decisions = pick_field(project_context, "final_decisions", "finalDecisions")
    if summary is None or decisions is None:
        missing = "project_summary" if summary is None else "final_decisions"
        raise ValidationError(
            f"project_context.{missing}",
            "project_context must include project_summary and final_decisions",
        )


def validate_generate_epics(arguments: Mapping[str, Any]) -> None:
    project_context = _require_object(arguments, "project_context")
    _require_context_sections(project_context)


def validate_generate_stories(arguments: Mapping[str, Any]) -> None:
    _require_object(arguments, "project_context")
    _require_array(arguments, "epics")


def validate_regenerate_epic(arguments: Mapping[str, Any]) -> None:
    _require_object(arguments, "project_context")
    _require_object(arguments, "epic")
    _require_text(arguments, "user_feedback")


def validate_regenerate_story(arguments: Mapping[str, Any]) -> None:
    _require_object(arguments, "project_context")
    _require_object(arguments, "epic")
    _require_object(arguments, "story")
    _require_text(arguments, "user_feedback")


VALIDATORS: Dict[str, Callable[[Mapping[str, Any]], None]] = {
    "generate_epics": validate_generate_epics,
    "generate_stories": validate_generate_stories,
    "regenerate_epic": validate_regenerate_epic,
    "regenerate_story": validate_regenerate_story,
}


def validate_arguments(tool_name: str, arguments: Any) -> None:
    """
    Check that ``arguments`` has the shape ``tool_name`` requires.

    Args:
        tool_name: One of the four StoryCrafter tool names
        arguments: Tool arguments from the ``tools/call`` request

    Raises:
        ValidationError: Naming the first missing or malformed field
        KeyError: If ``tool_name`` has no validator
    """
    if not isinstance(arguments, Mapping):
        raise ValidationError("arguments", "arguments must be an object")
    VALIDATORS[tool_name](arguments)
