from typing import Any, Dict, Iterable, Optional, Sequence, cast

import openai
from openai import AsyncOpenAI

from report_agent.agent_core import ModelClient, ModelResponse
from report_agent.agent_core.exceptions import TransportError
from report_agent.agent_core.messages import Conversation
from report_agent.agent_core.logger import get_logger
from .adapter import OpenAIMessageAdapter

logger = get_logger(__name__)


class OpenAIModelClient(ModelClient):
    """
    ModelClient for OpenAI and OpenAI-compatible chat-completions endpoints.
    One ``send`` is one HTTP request and is never retried.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model_name: str,
        temp: float = 1.0,
        max_tokens: int = 4096,
    ):
        """
        Initializes the OpenAI model client.

        Args:
            client: The initialized AsyncOpenAI client. Build it with ``max_retries=0``.
            model_name: The identifier of the model to use.
            temp: The temperature for text generation.
            max_tokens: The maximum number of tokens to generate per turn.
        """
        self.client: AsyncOpenAI = client
        self.model_name = model_name
        self.temperature = temp
        self.max_tokens = max_tokens
        self._adapter = OpenAIMessageAdapter()

    async def send(
        self,
        system_prompt: str,
        tools: Sequence[Dict[str, Any]],
        conversation: Conversation,
    ) -> ModelResponse:
        messages = self._adapter.build_messages(system_prompt, conversation)
        tool_params: Optional[list] = self._adapter.build_tools(tools) or None

        logger.debug(f"Sending {len(messages)} message(s) to OpenAI model '{self.model_name}'.")
        try:
            # Plain dicts are structurally compatible with the SDK's message union
            response = await self.client.chat.completions.create(
                model=self.model_name,
                messages=cast(Iterable[Any], messages),
                tools=tool_params,  # type: ignore[arg-type]
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.APIError as exc:
            msg = f"OpenAI request failed: {exc}"
            logger.error(msg)
            raise TransportError(msg) from exc

        return self._adapter.parse_response(response)
