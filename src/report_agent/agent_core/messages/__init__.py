"""Expose provider-agnostic conversation models shared by the loop and the model clients."""

from .models import Role, TextBlock, ToolCallBlock, ToolResultBlock, ContentBlock, Turn, Conversation

__all__ = [
    "Role",
    "TextBlock",
    "ToolCallBlock",
    "ToolResultBlock",
    "ContentBlock",
    "Turn",
    "Conversation",
]
