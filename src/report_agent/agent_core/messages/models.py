"""Provider-agnostic conversation models: content blocks, turns and the conversation itself."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, Iterator, List, Literal, Optional, Sequence, Set, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import ConversationError
from ..logger import get_logger

logger = get_logger(__name__)


class Role(str, Enum):
    """Author of a turn."""

    REQUESTER = "requester"
    ASSISTANT = "assistant"


class TextBlock(BaseModel):
    """Free text emitted by either side."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ToolCallBlock(BaseModel):
    """A tool invocation requested by the model.

    Attributes:
        id: Opaque call id, unique within the run.
        name: Name of the requested tool.
        input: Raw arguments as emitted by the model (usually a dict, sometimes a JSON string).
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_call"] = "tool_call"
    id: str
    name: str
    input: Any = None


class ToolResultBlock(BaseModel):
    """The outcome of one tool call, matched to it by ``tool_call_id``."""

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_result"] = "tool_result"
    tool_call_id: str
    name: str
    content: Dict[str, Any]
    is_error: bool = False


ContentBlock = Annotated[Union[TextBlock, ToolCallBlock, ToolResultBlock], Field(discriminator="type")]


class Turn(BaseModel):
    """One role-tagged message in the exchange. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    role: Role
    blocks: Tuple[ContentBlock, ...] = ()

    @classmethod
    def requester_text(cls, text: str) -> "Turn":
        return cls(role=Role.REQUESTER, blocks=(TextBlock(text=text),))

    @classmethod
    def assistant(cls, blocks: Sequence[Union[TextBlock, ToolCallBlock]]) -> "Turn":
        return cls(role=Role.ASSISTANT, blocks=tuple(blocks))

    @classmethod
    def tool_results_turn(cls, results: Sequence[ToolResultBlock]) -> "Turn":
        return cls(role=Role.REQUESTER, blocks=tuple(results))

    def tool_calls(self) -> List[ToolCallBlock]:
        return [b for b in self.blocks if isinstance(b, ToolCallBlock)]

    def tool_results(self) -> List[ToolResultBlock]:
        return [b for b in self.blocks if isinstance(b, ToolResultBlock)]

    def text(self) -> str:
        """Concatenated text blocks of the turn."""
        return "\n".join(b.text for b in self.blocks if isinstance(b, TextBlock))


class Conversation:
    """Append-only ordered history of turns.

    The conversation guards the call/result pairing: every tool call id is issued at
    most once, and every tool result answers exactly one previously issued call.
    """

    def __init__(self, turns: Optional[Sequence[Turn]] = None) -> None:
        self._turns: List[Turn] = []
        self._issued: Dict[str, str] = {}
        self._answered: Set[str] = set()
        for turn in turns or ():
            self.append(turn)

    def append(self, turn: Turn) -> None:
        """Append a turn after checking it against the ids seen so far.

        Args:
            turn: The turn to append.

        Raises:
            ConversationError: If a call id is reused, or a result is orphaned or duplicated.
        """
        new_calls: Dict[str, str] = {}
        new_answers: Set[str] = set()

        for block in turn.blocks:
            if isinstance(block, ToolCallBlock):
                if block.id in self._issued or block.id in new_calls:
                    msg = f"Tool call id '{block.id}' was already issued in this conversation."
                    logger.error(msg)
                    raise ConversationError(msg)
                new_calls[block.id] = block.name
            elif isinstance(block, ToolResultBlock):
                call_id = block.tool_call_id
                if call_id not in self._issued:
                    msg = f"Tool result references unknown call id '{call_id}'."
                    logger.error(msg)
                    raise ConversationError(msg)
                if call_id in self._answered or call_id in new_answers:
                    msg = f"Tool call '{call_id}' already has a result."
                    logger.error(msg)
                    raise ConversationError(msg)
                new_answers.add(call_id)

        self._issued.update(new_calls)
        self._answered.update(new_answers)
        self._turns.append(turn)

    @property
    def turns(self) -> Tuple[Turn, ...]:
        return tuple(self._turns)

    def unanswered_call_ids(self) -> List[str]:
        return [call_id for call_id in self._issued if call_id not in self._answered]

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))
