"""Data models for tool dispatch."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ...messages.models import ToolCallBlock, ToolResultBlock

# A tool call is the model-emitted block itself; dispatch never needs more.
ToolCall = ToolCallBlock


@dataclass(frozen=True)
class ValidationFailure:
    """Describes why tool-call arguments were rejected. Returned, never raised."""

    tool_name: str
    message: str
    fields: List[str] = field(default_factory=list)
    kind: str = "schema_validation"


@dataclass(frozen=True)
class ToolError:
    """Structured error descriptor carried by a failed tool result."""

    kind: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def as_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message, "error_type": self.kind}
        payload.update(self.details)
        return payload


@dataclass(frozen=True)
class ToolResult:
    """Represents the outcome of executing one tool call: a payload XOR an error."""

    call_id: str
    name: str
    payload: Optional[Dict[str, Any]] = None
    error: Optional[ToolError] = None
    terminal: bool = False

    def __post_init__(self) -> None:
        if (self.payload is None) == (self.error is None):
            raise ValueError("ToolResult needs exactly one of payload or error.")

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, call: ToolCall, payload: Dict[str, Any], terminal: bool = False) -> "ToolResult":
        return cls(call_id=call.id, name=call.name, payload=payload, terminal=terminal)

    @classmethod
    def failure(
        cls, call: ToolCall, kind: str, message: str, details: Optional[Dict[str, Any]] = None
    ) -> "ToolResult":
        return cls(call_id=call.id, name=call.name, error=ToolError(kind=kind, message=message, details=details or {}))

    def to_block(self) -> ToolResultBlock:
        """Convert into the conversation block that answers the call."""
        if self.error is not None:
            return ToolResultBlock(
                tool_call_id=self.call_id, name=self.name, content=self.error.as_payload(), is_error=True
            )
        return ToolResultBlock(tool_call_id=self.call_id, name=self.name, content=dict(self.payload or {}))
