"""Re-export the model client contract shared by all providers."""

from .base import ModelClient, ModelResponse, StopReason

__all__ = [
    "ModelClient",
    "ModelResponse",
    "StopReason",
]
