"""Collect concrete model clients and web search providers."""

from .gemini import GeminiModelClient, GeminiSearchProvider
from .openai_api import OpenAIModelClient, OpenAISearchProvider

__all__ = [
    "GeminiModelClient",
    "GeminiSearchProvider",
    "OpenAIModelClient",
    "OpenAISearchProvider",
]
