from pathlib import Path
from typing import Annotated, Any, Dict

import pytest
from pydantic import Field

from report_agent.agent_core import (
    AgentLoop,
    LoopPhase,
    RenderError,
    Role,
    RunStatus,
    SchemaError,
    StopReason,
    ToolDispatcher,
    ToolRegistry,
    TransportError,
)
from report_agent.survey import SurveyToolkit
from scripted import ScriptedModelClient, call, text_reply, tool_reply


def _loop(client: ScriptedModelClient, registry: ToolRegistry, max_iterations: int = 5) -> AgentLoop:
    return AgentLoop(
        client,
        registry,
        ToolDispatcher(registry),
        system_prompt="You are a test agent.",
        max_iterations=max_iterations,
    )


@pytest.mark.asyncio
async def test_terminal_tool_success_ends_the_run(toy_registry: ToolRegistry) -> None:
    client = ScriptedModelClient(
        [
            tool_reply(call("c1", "echo", {"text": "hi"})),
            tool_reply(call("c2", "finish", {"path": "report.md"})),
        ]
    )

    result = await _loop(client, toy_registry).run("Write the report.")

    assert result.status is RunStatus.ARTIFACT_PRODUCED
    assert result.succeeded
    assert result.iterations == 2
    assert result.artifact_path == "report.md"
    assert result.error is None
    assert len(client.requests) == 2
    assert [t.role for t in result.turns] == [
        Role.REQUESTER,
        Role.ASSISTANT,
        Role.REQUESTER,
        Role.ASSISTANT,
        Role.REQUESTER,
    ]


@pytest.mark.asyncio
async def test_text_only_reply_ends_without_artifact(toy_registry: ToolRegistry) -> None:
    client = ScriptedModelClient([text_reply("I cannot do that.")])

    result = await _loop(client, toy_registry).run("Write the report.")

    assert result.status is RunStatus.ENDED_WITHOUT_ARTIFACT
    assert result.iterations == 1
    assert result.artifact_path is None
    assert result.turns[-1].text() == "I cannot do that."


@pytest.mark.asyncio
async def test_truncated_text_reply_does_not_end_the_run(toy_registry: ToolRegistry) -> None:
    client = ScriptedModelClient(
        [text_reply("Let me think", stop_reason=StopReason.MAX_TOKENS), text_reply("Giving up.")]
    )

    result = await _loop(client, toy_registry).run("Write the report.")

    assert result.status is RunStatus.ENDED_WITHOUT_ARTIFACT
    assert result.iterations == 2


@pytest.mark.asyncio
async def test_budget_is_never_exceeded(toy_registry: ToolRegistry) -> None:
    client = ScriptedModelClient([tool_reply(call(f"c{i}", "echo", {"text": str(i)})) for i in range(10)])

    result = await _loop(client, toy_registry, max_iterations=3).run("Write the report.")

    assert result.status is RunStatus.ABORTED_AT_BUDGET
    assert result.iterations == 3
    assert len(client.requests) == 3


@pytest.mark.asyncio
async def test_artifact_on_last_iteration_counts_as_success(toy_registry: ToolRegistry) -> None:
    client = ScriptedModelClient(
        [
            tool_reply(call("c1", "echo", {"text": "hi"})),
            tool_reply(call("c2", "finish", {"path": "report.md"})),
        ]
    )

    result = await _loop(client, toy_registry, max_iterations=2).run("Write the report.")

    assert result.status is RunStatus.ARTIFACT_PRODUCED
    assert result.iterations == 2


@pytest.mark.asyncio
async def test_every_call_gets_exactly_one_result_in_order(toy_registry: ToolRegistry) -> None:
    client = ScriptedModelClient(
        [
            tool_reply(
                call("a", "echo", {"text": "1"}),
                call("b", "nope", {}),
                call("c", "echo", {"text": "3"}),
                text="Checking three things.",
            ),
            text_reply("Done."),
        ]
    )

    result = await _loop(client, toy_registry).run("Write the report.")

    results_turn = result.turns[2]
    assert results_turn.role is Role.REQUESTER
    blocks = results_turn.tool_results()
    assert [b.tool_call_id for b in blocks] == ["a", "b", "c"]
    assert [b.is_error for b in blocks] == [False, True, False]
    assert blocks[1].content["error_type"] == "unknown_tool"
    assert result.turns[1].text() == "Checking three things."


@pytest.mark.asyncio
async def test_recoverable_errors_are_fed_back_to_the_model(toy_registry: ToolRegistry) -> None:
    client = ScriptedModelClient(
        [
            tool_reply(call("c1", "finish", {})),
            tool_reply(call("c2", "finish", {"path": "report.md"})),
        ]
    )

    result = await _loop(client, toy_registry).run("Write the report.")

    assert result.status is RunStatus.ARTIFACT_PRODUCED
    first_result = result.turns[2].tool_results()[0]
    assert first_result.is_error
    assert first_result.content["fields"] == ["path"]
    # The second request already carried the error result
    assert client.requests[1]["turns"][-1] == result.turns[2]


@pytest.mark.asyncio
async def test_calls_after_terminal_success_in_same_turn_are_still_answered(toy_registry: ToolRegistry) -> None:
    client = ScriptedModelClient(
        [tool_reply(call("c1", "finish", {"path": "report.md"}), call("c2", "echo", {"text": "after"}))]
    )

    result = await _loop(client, toy_registry).run("Write the report.")

    assert result.status is RunStatus.ARTIFACT_PRODUCED
    assert [b.tool_call_id for b in result.turns[-1].tool_results()] == ["c1", "c2"]


@pytest.mark.asyncio
async def test_transport_error_aborts_the_run(toy_registry: ToolRegistry) -> None:
    client = ScriptedModelClient(
        [tool_reply(call("c1", "echo", {"text": "hi"})), TransportError("Connection reset by peer")]
    )

    result = await _loop(client, toy_registry).run("Write the report.")

    assert result.status is RunStatus.ABORTED_ON_ERROR
    assert result.iterations == 1
    assert result.error == "Connection reset by peer"
    assert "TransportError" in result.reason
    # The conversation up to the failure is preserved and fully paired
    assert len(result.turns) == 3


@pytest.mark.asyncio
async def test_reused_call_id_aborts_the_run(toy_registry: ToolRegistry) -> None:
    client = ScriptedModelClient(
        [tool_reply(call("same", "echo", {"text": "1"})), tool_reply(call("same", "echo", {"text": "2"}))]
    )

    result = await _loop(client, toy_registry).run("Write the report.")

    assert result.status is RunStatus.ABORTED_ON_ERROR
    assert "ConversationError" in result.reason


@pytest.mark.asyncio
async def test_unexpected_exception_aborts_the_run(toy_registry: ToolRegistry) -> None:
    client = ScriptedModelClient([tool_reply(call("c1", "echo", {"text": "hi"})), KeyError("choices")])
    loop = _loop(client, toy_registry)

    result = await loop.run("Write the report.")

    assert result.status is RunStatus.ABORTED_ON_ERROR
    assert result.iterations == 1
    assert "KeyError" in result.reason
    assert result.error == "'choices'"
    assert len(result.turns) == 3
    assert loop.phase is LoopPhase.TERMINATED


@pytest.mark.asyncio
async def test_render_failure_aborts_the_run() -> None:
    registry = ToolRegistry()

    @registry.tool(terminal=True)
    def finish(path: Annotated[str, Field(description="Path")]) -> Dict[str, Any]:
        """Write the artifact."""
        raise RenderError(f"Could not write report to {path}")

    client = ScriptedModelClient([tool_reply(call("c1", "finish", {"path": "/readonly/report.md"}))])

    result = await _loop(client, registry).run("Write the report.")

    assert result.status is RunStatus.ABORTED_ON_ERROR
    assert result.artifact_path is None


@pytest.mark.asyncio
async def test_registry_is_frozen_and_described_once(toy_registry: ToolRegistry) -> None:
    client = ScriptedModelClient([tool_reply(call("c1", "echo", {"text": "hi"})), text_reply("Done.")])
    loop = _loop(client, toy_registry)

    await loop.run("Write the report.")

    assert toy_registry.frozen
    assert loop.phase is LoopPhase.TERMINATED
    assert client.requests[0]["tools"] is client.requests[1]["tools"]
    assert client.requests[0]["system_prompt"] == "You are a test agent."
    with pytest.raises(SchemaError):
        toy_registry.register("late", "Too late.", lambda: {}, {"type": "object", "properties": {}})


def test_budget_must_be_positive(toy_registry: ToolRegistry) -> None:
    with pytest.raises(ValueError):
        _loop(ScriptedModelClient([]), toy_registry, max_iterations=0)


@pytest.mark.asyncio
async def test_full_survey_run_writes_the_report(toolkit: SurveyToolkit, report_path: Path) -> None:
    registry = toolkit.build_registry()
    client = ScriptedModelClient(
        [
            tool_reply(call("c1", "get_available_data")),
            tool_reply(call("c2", "get_breakdown", {"year": "2019", "dimension": "grade"})),
            tool_reply(call("c3", "get_subgroup_trend", {"dimension": "grade", "subgroup": "8th"})),
            tool_reply(call("c4", "get_policy_context")),
            tool_reply(
                call(
                    "c5",
                    "generate_report",
                    {
                        "title": "Weekly Youth Survey Report",
                        "sections": [
                            {
                                "heading": "8th Grade Trend",
                                "content": "Use rose by 6.0 points since 2011.",
                                "alert_level": "warning",
                            }
                        ],
                        "recommendations": ["Target prevention at 8th graders."],
                    },
                )
            ),
        ]
    )

    result = await _loop(client, registry, max_iterations=15).run("Write the report.")

    assert result.status is RunStatus.ARTIFACT_PRODUCED
    assert result.iterations == 5
    assert result.artifact_path == str(report_path)
    document = report_path.read_text(encoding="utf-8")
    assert document.startswith("# Weekly Youth Survey Report")
    assert "> **⚠ WARNING:** Use rose by 6.0 points since 2011." in document
    trend = result.turns[6].tool_results()[0].content
    assert trend["total_change"] == 6.0


_REPORT = {
    "title": "Weekly Youth Survey Report",
    "sections": [{"heading": "Overview", "content": "Use held steady in 2019."}],
}


@pytest.mark.asyncio
async def test_survey_run_recovers_from_an_unavailable_year(toolkit: SurveyToolkit, report_path: Path) -> None:
    client = ScriptedModelClient(
        [
            tool_reply(call("c1", "get_overall_rate", {"year": "2021"})),
            tool_reply(call("c2", "get_overall_rate", {"year": "2019"})),
            tool_reply(call("c3", "generate_report", _REPORT)),
        ]
    )

    result = await _loop(client, toolkit.build_registry(), max_iterations=15).run("Write the report.")

    assert result.status is RunStatus.ARTIFACT_PRODUCED
    assert result.iterations == 3
    failed = result.turns[2].tool_results()[0]
    assert failed.is_error
    assert failed.content["available_years"] == ["2011", "2013", "2015", "2017", "2019"]
    assert not result.turns[4].tool_results()[0].is_error
    assert report_path.exists()


@pytest.mark.asyncio
async def test_survey_run_recovers_from_a_malformed_report(toolkit: SurveyToolkit, report_path: Path) -> None:
    client = ScriptedModelClient(
        [
            tool_reply(call("c1", "generate_report", {"subtitle": "2011-2019"})),
            tool_reply(call("c2", "generate_report", _REPORT)),
        ]
    )

    result = await _loop(client, toolkit.build_registry(), max_iterations=15).run("Write the report.")

    assert result.status is RunStatus.ARTIFACT_PRODUCED
    assert result.iterations == 2
    rejected = result.turns[2].tool_results()[0]
    assert rejected.is_error
    assert rejected.content["error_type"] == "schema_validation"
    assert rejected.content["fields"] == ["sections", "title"]
    assert result.artifact_path == str(report_path)
