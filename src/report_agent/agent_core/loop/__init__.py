"""Agent loop, its run state and the termination policy."""

from .state import AgentRunState, LoopPhase, RunStatus, Verdict
from .termination import TerminationPolicy
from .agent_loop import AgentLoop, RunResult

__all__ = [
    "AgentRunState",
    "LoopPhase",
    "RunStatus",
    "Verdict",
    "TerminationPolicy",
    "AgentLoop",
    "RunResult",
]
