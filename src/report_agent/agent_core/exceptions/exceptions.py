"""
Exception hierarchy for the report agent.

Tool-level problems (schema validation, provider lookups, unknown tools, failing
searches) are recoverable: the dispatcher turns them into error tool results that
are fed back to the model. Transport, rendering and conversation-protocol errors
are fatal and end the run.
"""

from typing import Any, Dict, Optional


class AgentError(Exception):
    """Base exception for all report agent errors."""

    pass


class AgentToolError(AgentError):
    """Base exception for tool-related errors."""

    pass


class SchemaError(AgentToolError):
    """Raised when a tool cannot be registered because of its name or input schema."""

    pass


class UnknownToolError(AgentToolError):
    """Raised when a requested tool is not found in the registry."""

    pass


class ProviderError(AgentToolError):
    """Raised when valid arguments cannot be resolved against the dataset.

    Attributes:
        guidance: Extra data for the model, e.g. the list of valid keys.
    """

    def __init__(self, message: str, guidance: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.guidance: Dict[str, Any] = dict(guidance or {})


class SearchError(AgentToolError):
    """Raised when a web search cannot produce a summary."""

    pass


class TransportError(AgentError):
    """Raised when the model endpoint cannot complete a request. Fatal for the run."""

    pass


class RenderError(AgentError):
    """Raised when the report document cannot be persisted. Fatal for the run."""

    pass


class ConversationError(AgentError):
    """Raised when a turn would break the call/result pairing of the conversation."""

    pass


class ConfigError(AgentError):
    """Raised when the run configuration is invalid or incomplete."""

    pass
