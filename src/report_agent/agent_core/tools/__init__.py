from .models import ToolDefinition, ToolCall, ToolResult, ToolError, ValidationFailure
from .registry import ToolRegistry
from .execution import ToolDispatcher
from .schema import SchemaValidator

__all__ = [
    "ToolDefinition",
    "ToolCall",
    "ToolResult",
    "ToolError",
    "ValidationFailure",
    "ToolRegistry",
    "ToolDispatcher",
    "SchemaValidator",
]
