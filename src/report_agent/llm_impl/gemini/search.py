"""Web search grounded with Gemini's Google Search tool."""

import httpx
from google.genai import errors, types
from google.genai.client import AsyncClient

from report_agent.agent_core.exceptions import SearchError
from report_agent.agent_core.logger import get_logger

logger = get_logger(__name__)


class GeminiSearchProvider:
    """Turns a natural-language query into a short factual summary."""

    def __init__(self, aclient: AsyncClient, model_name: str, max_output_tokens: int = 1024) -> None:
        self.client = aclient
        self.model_name = model_name
        self.max_output_tokens = max_output_tokens

    async def search(self, query: str) -> str:
        """Search the web and summarize the findings.

        Raises:
            SearchError: If the request fails or yields no text.
        """
        logger.info(f'Searching: "{query}"')
        config = types.GenerateContentConfig(
            tools=[types.Tool(google_search=types.GoogleSearch())],
            max_output_tokens=self.max_output_tokens,
        )
        try:
            response = await self.client.models.generate_content(
                model=self.model_name,
                contents=f"Search the web and provide a concise factual summary: {query}",
                config=config,
            )
        except (errors.APIError, httpx.HTTPError) as exc:
            logger.warning(f"Web search failed: {exc}")
            raise SearchError("Web search failed") from exc

        text = (response.text or "").strip()
        if not text:
            raise SearchError("Web search returned no summary")
        return text
