"""Public exports for the agent loop, tool protocol and shared utilities."""

from .base import ModelClient, ModelResponse, StopReason
from .exceptions import (
    AgentError,
    AgentToolError,
    SchemaError,
    UnknownToolError,
    ProviderError,
    SearchError,
    TransportError,
    RenderError,
    ConversationError,
    ConfigError,
)
from .logger import get_logger, setup_logging
from .messages import Role, TextBlock, ToolCallBlock, ToolResultBlock, Turn, Conversation
from .tools import (
    ToolDefinition,
    ToolCall,
    ToolResult,
    ToolError,
    ValidationFailure,
    ToolRegistry,
    ToolDispatcher,
    SchemaValidator,
)
from .loop import AgentLoop, AgentRunState, LoopPhase, RunResult, RunStatus, TerminationPolicy, Verdict

__all__ = [
    "ModelClient",
    "ModelResponse",
    "StopReason",
    "AgentError",
    "AgentToolError",
    "SchemaError",
    "UnknownToolError",
    "ProviderError",
    "SearchError",
    "TransportError",
    "RenderError",
    "ConversationError",
    "ConfigError",
    "get_logger",
    "setup_logging",
    "Role",
    "TextBlock",
    "ToolCallBlock",
    "ToolResultBlock",
    "Turn",
    "Conversation",
    "ToolDefinition",
    "ToolCall",
    "ToolResult",
    "ToolError",
    "ValidationFailure",
    "ToolRegistry",
    "ToolDispatcher",
    "SchemaValidator",
    "AgentLoop",
    "AgentRunState",
    "LoopPhase",
    "RunResult",
    "RunStatus",
    "TerminationPolicy",
    "Verdict",
]
