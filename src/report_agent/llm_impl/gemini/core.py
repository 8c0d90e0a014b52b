from typing import Any, Dict, Optional, Sequence

import httpx
from google.genai import errors, types
from google.genai.client import AsyncClient

from report_agent.agent_core import ModelClient, ModelResponse
from report_agent.agent_core.exceptions import TransportError
from report_agent.agent_core.messages import Conversation
from report_agent.agent_core.logger import get_logger
from .adapter import GeminiMessageAdapter

logger = get_logger(__name__)


class GeminiModelClient(ModelClient):
    """
    ModelClient for Google's Gemini models.
    The conversation is rebuilt on every request; no SDK chat session is kept.
    """

    def __init__(
        self,
        aclient: AsyncClient,
        model_name: str,
        temp: float = 1.0,
        max_tokens: int = 4096,
    ):
        """
        Initializes the Gemini model client.

        Args:
            aclient: The async Google GenAI client (``Client(...).aio``).
            model_name: The identifier of the Gemini model to use.
            temp: The temperature for text generation.
            max_tokens: The maximum number of tokens to generate per turn.
        """
        self.client: AsyncClient = aclient
        self.model_name = model_name
        self.temperature = temp
        self.max_tokens = max_tokens
        self._adapter = GeminiMessageAdapter()
        logger.info(f"Initialized GeminiModelClient with model='{model_name}', temp={temp}, max_tokens={max_tokens}")

    async def send(
        self,
        system_prompt: str,
        tools: Sequence[Dict[str, Any]],
        conversation: Conversation,
    ) -> ModelResponse:
        tool = self._adapter.build_tool(tools)
        tools_config: Optional[list] = [tool] if tool else None
        config = types.GenerateContentConfig(
            system_instruction=system_prompt or None,
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
            tools=tools_config,
        )
        contents = self._adapter.build_contents(conversation)

        logger.debug(f"Sending {len(contents)} content(s) to Gemini model '{self.model_name}'.")
        try:
            response = await self.client.models.generate_content(
                model=self.model_name,
                contents=contents,  # type: ignore[arg-type]
                config=config,
            )
        except (errors.APIError, httpx.HTTPError) as exc:
            msg = f"Gemini request failed: {exc}"
            logger.error(msg)
            raise TransportError(msg) from exc

        return self._adapter.parse_response(response)
