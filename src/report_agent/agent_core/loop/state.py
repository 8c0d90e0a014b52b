"""Run-level bookkeeping of the agent loop."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LoopPhase(str, Enum):
    AWAITING_MODEL = "awaiting_model"
    PROCESSING_RESPONSE = "processing_response"
    DISPATCHING_TOOLS = "dispatching_tools"
    EVALUATING_TERMINATION = "evaluating_termination"
    TERMINATED = "terminated"


class Verdict(str, Enum):
    """Closed set of termination decisions."""

    CONTINUE = "continue"
    STOP_SUCCESS = "stop_success"
    STOP_INCOMPLETE = "stop_incomplete"
    ABORT_BUDGET = "abort_budget"


class RunStatus(str, Enum):
    """How a run ended. Every run ends with exactly one of these."""

    ARTIFACT_PRODUCED = "artifact_produced"
    ENDED_WITHOUT_ARTIFACT = "ended_without_artifact"
    ABORTED_AT_BUDGET = "aborted_at_budget"
    ABORTED_ON_ERROR = "aborted_on_error"

    @classmethod
    def from_verdict(cls, verdict: Verdict) -> "RunStatus":
        mapping = {
            Verdict.STOP_SUCCESS: cls.ARTIFACT_PRODUCED,
            Verdict.STOP_INCOMPLETE: cls.ENDED_WITHOUT_ARTIFACT,
            Verdict.ABORT_BUDGET: cls.ABORTED_AT_BUDGET,
        }
        if verdict not in mapping:
            raise ValueError(f"Verdict '{verdict.value}' does not end a run.")
        return mapping[verdict]


@dataclass
class AgentRunState:
    """Mutable state of one run, owned exclusively by the agent loop.

    Attributes:
        max_iterations: Iteration budget of the run.
        iteration: Number of completed model turns.
        artifact_emitted: Set when the terminal tool succeeded.
        terminal: Set once, when a stopping verdict is applied.
        verdict: The verdict that ended the run.
    """

    max_iterations: int
    iteration: int = 0
    artifact_emitted: bool = False
    terminal: bool = False
    verdict: Optional[Verdict] = None

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1.")

    def advance(self) -> int:
        """Count one completed iteration."""
        if self.iteration >= self.max_iterations:
            raise RuntimeError(f"Iteration budget of {self.max_iterations} already exhausted.")
        self.iteration += 1
        return self.iteration

    def mark_artifact_emitted(self) -> None:
        self.artifact_emitted = True

    def terminate(self, verdict: Verdict) -> None:
        if self.terminal:
            raise RuntimeError("Run state is already terminal.")
        if verdict is Verdict.CONTINUE:
            raise ValueError("CONTINUE does not terminate a run.")
        self.terminal = True
        self.verdict = verdict
