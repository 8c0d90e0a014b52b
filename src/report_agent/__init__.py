"""Report agent - a model-driven tool loop that analyzes survey data and writes one report."""

from .agent_core import (
    AgentLoop,
    ModelClient,
    ModelResponse,
    RunResult,
    RunStatus,
    StopReason,
    TerminationPolicy,
    ToolDispatcher,
    ToolRegistry,
)
from .config import AgentConfig
from .app import build_agent, run_agent

__all__ = [
    "AgentLoop",
    "ModelClient",
    "ModelResponse",
    "RunResult",
    "RunStatus",
    "StopReason",
    "TerminationPolicy",
    "ToolDispatcher",
    "ToolRegistry",
    "AgentConfig",
    "build_agent",
    "run_agent",
]
