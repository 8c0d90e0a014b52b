"""The agent state machine: request, parse, dispatch, evaluate, repeat."""

from __future__ import annotations

import time
from typing import List, Optional

from pydantic import BaseModel

from .state import AgentRunState, LoopPhase, RunStatus, Verdict
from .termination import TerminationPolicy
from ..base import ModelClient
from ..exceptions import AgentError, ConversationError
from ..messages import Conversation, Turn
from ..tools import ToolCall, ToolDispatcher, ToolRegistry, ToolResult
from ..logger import get_logger

logger = get_logger(__name__)


class RunResult(BaseModel):
    """Outcome of one run as surfaced to the caller.

    Attributes:
        status: One of the four terminal statuses.
        reason: Human-readable explanation of the status.
        iterations: Number of completed model turns.
        elapsed_seconds: Wall-clock duration of the run.
        artifact_path: Location reported by the terminal tool, if it succeeded.
        error: Message of the fatal error for aborted runs.
        turns: The full conversation.
    """

    status: RunStatus
    reason: str
    iterations: int
    elapsed_seconds: float
    artifact_path: Optional[str] = None
    error: Optional[str] = None
    turns: List[Turn]

    @property
    def succeeded(self) -> bool:
        return self.status is RunStatus.ARTIFACT_PRODUCED


class AgentLoop:
    """Drives one conversation with a model until the termination policy stops it.

    The loop owns the conversation and the run state. Tool calls of a turn are
    dispatched sequentially in arrival order, and all of their results are appended
    as a single requester turn keyed by call id.
    """

    def __init__(
        self,
        client: ModelClient,
        registry: ToolRegistry,
        dispatcher: ToolDispatcher,
        *,
        system_prompt: str,
        max_iterations: int,
        policy: Optional[TerminationPolicy] = None,
    ) -> None:
        """Initialize the loop.

        Args:
            client: Model endpoint.
            registry: Tools offered to the model. Frozen when the run starts.
            dispatcher: Executes the model's tool calls.
            system_prompt: Fixed system instructions sent with every request.
            max_iterations: Iteration budget.
            policy: Termination policy, defaults to the standard one.
        """
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1.")
        self._client = client
        self._registry = registry
        self._dispatcher = dispatcher
        self._system_prompt = system_prompt
        self._max_iterations = max_iterations
        self._policy = policy or TerminationPolicy()
        self.phase = LoopPhase.AWAITING_MODEL

    async def run(self, initial_request: str) -> RunResult:
        """Run the conversation to completion.

        Never raises for run-level failures: fatal errors end the run with
        ``RunStatus.ABORTED_ON_ERROR``.

        Args:
            initial_request: The first requester message.

        Returns:
            The run result.
        """
        started = time.perf_counter()
        conversation = Conversation([Turn.requester_text(initial_request)])
        state = AgentRunState(max_iterations=self._max_iterations)
        artifact_path: Optional[str] = None

        self._registry.freeze()
        tools = self._registry.describe()

        try:
            while not state.terminal:
                logger.info(f"Agent iteration {state.iteration + 1}/{state.max_iterations}")

                self._enter(LoopPhase.AWAITING_MODEL)
                response = await self._client.send(self._system_prompt, tools, conversation)

                self._enter(LoopPhase.PROCESSING_RESPONSE)
                assistant_turn = Turn.assistant(response.blocks)
                conversation.append(assistant_turn)
                for text in (b.text for b in response.blocks if b.type == "text"):
                    logger.info(f"Model: {text[:100]}")

                calls = response.tool_calls
                if calls:
                    self._enter(LoopPhase.DISPATCHING_TOOLS)
                    results = await self._dispatch_all(calls)
                    conversation.append(Turn.tool_results_turn([r.to_block() for r in results]))
                    unanswered = conversation.unanswered_call_ids()
                    if unanswered:
                        raise ConversationError(f"Tool calls left without a result: {unanswered}")
                    for result in results:
                        if result.terminal and result.ok:
                            state.mark_artifact_emitted()
                            artifact_path = artifact_path or _artifact_location(result)

                self._enter(LoopPhase.EVALUATING_TERMINATION)
                state.advance()
                verdict = self._policy.evaluate(state, assistant_turn, response.stop_reason)
                logger.debug(f"Verdict after iteration {state.iteration}: {verdict.value}")
                if verdict is not Verdict.CONTINUE:
                    state.terminate(verdict)

        except AgentError as exc:
            logger.error(f"Run aborted on fatal error ({type(exc).__name__}): {exc}")
            return self._aborted(exc, state, conversation, started)
        except Exception as exc:
            logger.error(f"Run aborted on unexpected error ({type(exc).__name__}): {exc}", exc_info=True)
            return self._aborted(exc, state, conversation, started)

        self._enter(LoopPhase.TERMINATED)
        assert state.verdict is not None
        status = RunStatus.from_verdict(state.verdict)
        reason = _describe(status, state)
        if status is RunStatus.ARTIFACT_PRODUCED:
            logger.info(reason)
        else:
            logger.warning(reason)

        return RunResult(
            status=status,
            reason=reason,
            iterations=state.iteration,
            elapsed_seconds=round(time.perf_counter() - started, 3),
            artifact_path=artifact_path,
            turns=list(conversation.turns),
        )

    def _aborted(
        self, exc: Exception, state: AgentRunState, conversation: Conversation, started: float
    ) -> RunResult:
        self._enter(LoopPhase.TERMINATED)
        return RunResult(
            status=RunStatus.ABORTED_ON_ERROR,
            reason=f"{type(exc).__name__}: {exc}",
            iterations=state.iteration,
            elapsed_seconds=round(time.perf_counter() - started, 3),
            error=str(exc),
            turns=list(conversation.turns),
        )

    async def _dispatch_all(self, calls: List[ToolCall]) -> List[ToolResult]:
        results: List[ToolResult] = []
        for call in calls:
            results.append(await self._dispatcher.dispatch(call))
        logger.info(f"Dispatched {len(results)} tool call(s).")
        return results

    def _enter(self, phase: LoopPhase) -> None:
        logger.debug(f"{self.phase.value} -> {phase.value}")
        self.phase = phase


def _artifact_location(result: ToolResult) -> Optional[str]:
    payload = result.payload or {}
    location = payload.get("file") or payload.get("path")
    return str(location) if location else None


def _describe(status: RunStatus, state: AgentRunState) -> str:
    if status is RunStatus.ARTIFACT_PRODUCED:
        return f"Artifact produced after {state.iteration} iteration(s)."
    if status is RunStatus.ABORTED_AT_BUDGET:
        return f"Reached maximum iterations ({state.max_iterations}) without producing an artifact."
    return f"Model finished after {state.iteration} iteration(s) without producing an artifact."
