"""Core abstraction for model endpoints driven by the agent loop."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Sequence, Union

from pydantic import BaseModel, Field

from ..messages import Conversation, TextBlock, ToolCallBlock
from ..logger import get_logger

logger = get_logger(__name__)


class StopReason(str, Enum):
    """Why the model ended its turn, normalized across providers."""

    END_TURN = "end_turn"
    TOOL_USE = "tool_use"
    MAX_TOKENS = "max_tokens"
    OTHER = "other"


class ModelResponse(BaseModel):
    """Normalized model output.

    Attributes:
        stop_reason: Normalized completion reason.
        blocks: Text and tool-call blocks in the order the model produced them.
        raw: Provider-specific response payload for advanced use cases.
    """

    stop_reason: StopReason
    blocks: List[Union[TextBlock, ToolCallBlock]] = Field(default_factory=list)
    raw: Any = None

    @property
    def tool_calls(self) -> List[ToolCallBlock]:
        return [b for b in self.blocks if isinstance(b, ToolCallBlock)]


class ModelClient(ABC):
    """Abstract base class for model endpoints.

    Implementations translate the provider-agnostic conversation into their wire format,
    perform exactly one request per ``send`` call, never retry, and raise
    ``TransportError`` for any network or HTTP failure.
    """

    model_name: str

    @abstractmethod
    async def send(
        self,
        system_prompt: str,
        tools: Sequence[Dict[str, Any]],
        conversation: Conversation,
    ) -> ModelResponse:
        """
        Request the next assistant turn.

        Args:
            system_prompt: Fixed system instructions.
            tools: Tool declarations as returned by ``ToolRegistry.describe()``.
            conversation: The full conversation so far.

        Returns:
            The normalized model response.

        Raises:
            TransportError: If the endpoint cannot complete the request.
        """
        pass
