"""Contract of the web search collaborator used by the context tools."""

from typing import Protocol


class SearchProvider(Protocol):
    """Natural-language query in, best-effort text summary out."""

    async def search(self, query: str) -> str:
        """Return a short summary for the query.

        Raises:
            SearchError: If no summary can be produced.
        """
        ...
