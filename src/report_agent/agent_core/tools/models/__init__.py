"""Tool-related data models."""

from .models import ToolDefinition
from .tool_call import ToolCall, ToolResult, ToolError, ValidationFailure

__all__ = ["ToolDefinition", "ToolCall", "ToolResult", "ToolError", "ValidationFailure"]
