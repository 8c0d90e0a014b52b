"""Single place deciding whether a run goes on after a model turn."""

from typing import FrozenSet, Iterable

from .state import AgentRunState, Verdict
from ..base import StopReason
from ..messages import Turn


class TerminationPolicy:
    """Pure decision function over the run state and the latest assistant turn.

    Checks, in order: terminal tool success, iteration budget, model-signalled
    completion without tool calls. Success is checked before the budget, so an
    artifact produced on the last allowed iteration still counts as success.
    """

    def __init__(self, completion_reasons: Iterable[StopReason] = (StopReason.END_TURN,)) -> None:
        self.completion_reasons: FrozenSet[StopReason] = frozenset(completion_reasons)

    def evaluate(self, state: AgentRunState, turn: Turn, stop_reason: StopReason) -> Verdict:
        if state.artifact_emitted:
            return Verdict.STOP_SUCCESS
        if state.iteration >= state.max_iterations:
            return Verdict.ABORT_BUDGET
        if not turn.tool_calls() and stop_reason in self.completion_reasons:
            return Verdict.STOP_INCOMPLETE
        return Verdict.CONTINUE
