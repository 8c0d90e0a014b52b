import json
from typing import Any, Dict, List, Sequence

from openai.types.chat import ChatCompletion

from report_agent.agent_core.base import ModelResponse, StopReason
from report_agent.agent_core.exceptions import TransportError
from report_agent.agent_core.messages import Conversation, Role, TextBlock, ToolCallBlock
from report_agent.agent_core.logger import get_logger

logger = get_logger(__name__)

_FINISH_REASONS = {
    "stop": StopReason.END_TURN,
    "tool_calls": StopReason.TOOL_USE,
    "function_call": StopReason.TOOL_USE,
    "length": StopReason.MAX_TOKENS,
}


class OpenAIMessageAdapter:
    """Translates between the conversation model and the chat-completions wire format."""

    @staticmethod
    def build_tools(tools: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Convert tool declarations into OpenAI function tools.

        Args:
            tools: Declarations as returned by ``ToolRegistry.describe()``.

        Returns:
            A list of ``{"type": "function", ...}`` dictionaries.
        """
        return [
            {
                "type": "function",
                "function": {
                    "name": tool["name"],
                    "description": tool["description"],
                    "parameters": tool.get("input_schema") or {"type": "object", "properties": {}},
                },
            }
            for tool in tools
        ]

    @staticmethod
    def build_messages(system_prompt: str, conversation: Conversation) -> List[Dict[str, Any]]:
        """Convert the conversation into chat-completions messages.

        Tool results become one ``role="tool"`` message each, keyed by ``tool_call_id``.

        Args:
            system_prompt: System instructions, sent as the first message.
            conversation: The conversation so far.

        Returns:
            The list of message dictionaries.
        """
        messages: List[Dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        for turn in conversation:
            if turn.role is Role.ASSISTANT:
                message: Dict[str, Any] = {"role": "assistant", "content": turn.text() or None}
                calls = turn.tool_calls()
                if calls:
                    message["tool_calls"] = [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {"name": call.name, "arguments": _encode_arguments(call.input)},
                        }
                        for call in calls
                    ]
                messages.append(message)
                continue

            text = turn.text()
            if text:
                messages.append({"role": "user", "content": text})
            for result in turn.tool_results():
                messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": result.tool_call_id,
                        "content": json.dumps(result.content, default=str),
                    }
                )
        return messages

    @staticmethod
    def parse_response(response: ChatCompletion) -> ModelResponse:
        """Extract text and tool calls from a chat completion.

        Raises:
            TransportError: If the response carries no choices.
        """
        if not response.choices:
            raise TransportError("Model response contained no choices.")

        choice = response.choices[0]
        message = choice.message
        blocks: List[Any] = []

        if message.content:
            blocks.append(TextBlock(text=message.content))

        for tool_call in message.tool_calls or []:
            # Only function tool calls carry a name and arguments
            if tool_call.type == "function":
                blocks.append(
                    ToolCallBlock(id=tool_call.id, name=tool_call.function.name, input=tool_call.function.arguments)
                )

        stop_reason = _FINISH_REASONS.get(choice.finish_reason or "", StopReason.OTHER)
        if stop_reason is StopReason.OTHER:
            logger.debug(f"Unmapped finish reason: {choice.finish_reason}")
        return ModelResponse(stop_reason=stop_reason, blocks=blocks, raw=response)


def _encode_arguments(arguments: Any) -> str:
    if isinstance(arguments, str):
        return arguments
    return json.dumps(arguments or {}, default=str)
