"""Translate between the conversation model and Gemini contents, function calls and responses."""

import json
import uuid
from typing import Any, Dict, List, Optional, Sequence

from google.genai import types
from google.genai.types import GenerateContentResponse

from report_agent.agent_core.base import ModelResponse, StopReason
from report_agent.agent_core.exceptions import TransportError
from report_agent.agent_core.messages import Conversation, Role, TextBlock, ToolCallBlock
from report_agent.agent_core.logger import get_logger
from .schema_sanitizer import sanitize

logger = get_logger(__name__)


class GeminiMessageAdapter:
    """Adapter for Gemini content handling."""

    @staticmethod
    def build_tool(tools: Sequence[Dict[str, Any]]) -> Optional[types.Tool]:
        """Convert tool declarations into one Gemini `types.Tool`.

        Returns:
            The tool with all function declarations, or None if there are no tools.
        """
        if not tools:
            return None

        declarations = []
        for tool in tools:
            schema = tool.get("input_schema") or {}
            if schema.get("properties"):
                declarations.append(
                    types.FunctionDeclaration(
                        name=tool["name"], description=tool["description"], parameters=sanitize(schema)
                    )
                )
            else:
                declarations.append(types.FunctionDeclaration(name=tool["name"], description=tool["description"]))
        return types.Tool(function_declarations=declarations)

    @staticmethod
    def build_contents(conversation: Conversation) -> List[types.Content]:
        """Convert the conversation into Gemini contents.

        Function calls and responses carry the call id so results stay matched by id.
        """
        contents: List[types.Content] = []
        for turn in conversation:
            parts: List[types.Part] = []
            text = turn.text()
            if text:
                parts.append(types.Part(text=text))

            if turn.role is Role.ASSISTANT:
                for call in turn.tool_calls():
                    parts.append(
                        types.Part(
                            function_call=types.FunctionCall(id=call.id, name=call.name, args=_decode_arguments(call.input))
                        )
                    )
                role = "model"
            else:
                for result in turn.tool_results():
                    parts.append(
                        types.Part(
                            function_response=types.FunctionResponse(
                                id=result.tool_call_id, name=result.name, response=result.content
                            )
                        )
                    )
                role = "user"

            # Gemini rejects contents without parts
            if parts:
                contents.append(types.Content(role=role, parts=parts))
        return contents

    @staticmethod
    def parse_response(response: GenerateContentResponse) -> ModelResponse:
        """Extract text and function calls from a Gemini response.

        Gemini may omit call ids; unique ids are assigned so results can reference them.

        Raises:
            TransportError: If the response has no candidates.
        """
        if not response.candidates:
            raise TransportError("Gemini response contained no candidates.")

        candidate = response.candidates[0]
        blocks: List[Any] = []
        parts = candidate.content.parts if candidate.content and candidate.content.parts else []
        for part in parts:
            if part.function_call:
                function_call = part.function_call
                blocks.append(
                    ToolCallBlock(
                        id=function_call.id or f"call_{uuid.uuid4().hex[:16]}",
                        name=function_call.name or "",
                        input=dict(function_call.args or {}),
                    )
                )
            elif part.text and not part.thought:
                blocks.append(TextBlock(text=part.text))

        has_calls = any(isinstance(b, ToolCallBlock) for b in blocks)
        finish_reason = candidate.finish_reason
        if has_calls:
            stop_reason = StopReason.TOOL_USE
        elif finish_reason == types.FinishReason.STOP:
            stop_reason = StopReason.END_TURN
        elif finish_reason == types.FinishReason.MAX_TOKENS:
            stop_reason = StopReason.MAX_TOKENS
        else:
            logger.debug(f"Unmapped finish reason: {finish_reason}")
            stop_reason = StopReason.OTHER

        return ModelResponse(stop_reason=stop_reason, blocks=blocks, raw=response)


def _decode_arguments(arguments: Any) -> Dict[str, Any]:
    if isinstance(arguments, dict):
        return arguments
    if isinstance(arguments, str) and arguments:
        try:
            parsed = json.loads(arguments)
        except json.JSONDecodeError:
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}
