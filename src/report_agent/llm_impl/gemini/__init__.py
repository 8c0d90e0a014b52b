"""Expose the Gemini model client and grounded web search provider."""

from .core import GeminiModelClient
from .search import GeminiSearchProvider

__all__ = ["GeminiModelClient", "GeminiSearchProvider"]
