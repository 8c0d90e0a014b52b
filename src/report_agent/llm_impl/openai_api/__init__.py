"""Expose the OpenAI model client and web search provider."""

from .core import OpenAIModelClient
from .search import OpenAISearchProvider

__all__ = ["OpenAIModelClient", "OpenAISearchProvider"]
