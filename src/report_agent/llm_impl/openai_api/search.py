"""Web search backed by the OpenAI Responses API and its hosted search tool."""

import openai
from openai import AsyncOpenAI

from report_agent.agent_core.exceptions import SearchError
from report_agent.agent_core.logger import get_logger

logger = get_logger(__name__)


class OpenAISearchProvider:
    """Turns a natural-language query into a short factual summary."""

    def __init__(self, client: AsyncOpenAI, model_name: str, max_output_tokens: int = 1024) -> None:
        self.client = client
        self.model_name = model_name
        self.max_output_tokens = max_output_tokens

    async def search(self, query: str) -> str:
        """Search the web and summarize the findings.

        Raises:
            SearchError: If the request fails or yields no text.
        """
        logger.info(f'Searching: "{query}"')
        try:
            response = await self.client.responses.create(
                model=self.model_name,
                tools=[{"type": "web_search_preview"}],
                input=f"Search the web and provide a concise factual summary: {query}",
                max_output_tokens=self.max_output_tokens,
            )
        except openai.APIError as exc:
            logger.warning(f"Web search failed: {exc}")
            raise SearchError("Web search failed") from exc

        text = (response.output_text or "").strip()
        if not text:
            raise SearchError("Web search returned no summary")
        return text
