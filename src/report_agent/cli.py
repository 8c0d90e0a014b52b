"""Command line entry point."""

import asyncio
import logging
import sys
import time

import click

from report_agent.agent_core import AgentError, RunResult
from report_agent.agent_core.logger import get_logger, setup_logging
from report_agent.app import run_agent
from report_agent.config import AgentConfig

logger = get_logger(__name__)

RULE = "═" * 67


@click.command()
@click.option("--location", default=None, help="Location the survey data describes.")
@click.option("--topic", default=None, help="Survey topic.")
@click.option("--provider", type=click.Choice(["openai", "gemini"]), default=None, help="Model provider.")
@click.option("--model", "model_name", default=None, help="Model identifier.")
@click.option("--output", "output_path", default=None, type=click.Path(dir_okay=False), help="Report file path.")
@click.option("--max-iterations", type=int, default=None, help="Iteration budget of the agent loop.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    show_default=True,
)
def main(location, topic, provider, model_name, output_path, max_iterations, log_level):
    """Let the model explore the survey data and write a report."""
    setup_logging(level=getattr(logging, log_level.upper()))

    click.echo(RULE)
    click.echo("  AGENTIC WEEKLY REPORT SYSTEM")
    click.echo("  The model drives the analysis through autonomous tool use")
    click.echo(RULE)

    started = time.perf_counter()
    try:
        config = AgentConfig.from_env(
            location=location,
            topic=topic,
            provider=provider,
            model_name=model_name,
            output_path=output_path,
            max_iterations=max_iterations,
        )
        result = asyncio.run(run_agent(config))
    except AgentError as exc:
        elapsed = round(time.perf_counter() - started, 1)
        click.echo(f"\n❌ Agent error: {exc}", err=True)
        click.echo(f"  ⏱️  Total time: {elapsed} seconds")
        sys.exit(1)
    except Exception as exc:
        logger.error("Run failed with an unexpected error.", exc_info=True)
        elapsed = round(time.perf_counter() - started, 1)
        click.echo(f"\n❌ Unexpected error ({type(exc).__name__}): {exc}", err=True)
        click.echo(f"  ⏱️  Total time: {elapsed} seconds")
        sys.exit(1)

    _print_summary(result)
    sys.exit(0 if result.succeeded else 1)


def _print_summary(result: RunResult) -> None:
    click.echo("")
    click.echo(RULE)
    if result.succeeded:
        click.echo(f"  ✅ Report generated: {result.artifact_path}")
    else:
        click.echo("  ❌ Agent did not complete report generation")
        click.echo(f"  Status: {result.status.value} ({result.reason})")
    click.echo(f"  Iterations: {result.iterations}")
    click.echo(f"  ⏱️  Total time: {round(result.elapsed_seconds, 1)} seconds")
    click.echo(RULE)
