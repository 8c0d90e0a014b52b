"""Export the exception hierarchy used across registration, dispatch and the agent loop."""

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

__all__ = [
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
]
