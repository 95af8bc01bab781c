"""Result-or-error return type shared by every tool handler."""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import StoryCrafterError


@dataclass
class ToolResult:
    """Outcome of a single tool invocation.

    Exactly one of ``payload`` and ``error`` is set. Handlers return a
    ``ToolResult`` instead of raising so that a single translator at the
    protocol layer decides how each error kind is put on the wire.
    """

    tool: str
    payload: Optional[Dict[str, Any]] = None
    error: Optional[StoryCrafterError] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def success_result(cls, tool: str, payload: Dict[str, Any]) -> "ToolResult":
        """Create success result."""
        return cls(tool=tool, payload=payload)

    @classmethod
    def error_result(cls, tool: str, error: StoryCrafterError) -> "ToolResult":
        """Create error result."""
        return cls(tool=tool, error=error)

    def unwrap(self) -> Dict[str, Any]:
        """Return the payload, raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.payload or {}

    def to_content(self) -> Dict[str, Any]:
        """Serialize a successful result to MCP text content."""
        return {
            "content": [
                {
                    "type": "text",
                    "text": json.dumps(self.unwrap(), indent=2, ensure_ascii=False),
                }
            ]
        }
