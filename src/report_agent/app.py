"""Assemble the collaborators of a run and execute it."""

from typing import Optional, Tuple

from google import genai
from openai import AsyncOpenAI

from report_agent.agent_core import AgentLoop, ModelClient, RunResult, ToolDispatcher
from report_agent.agent_core.logger import get_logger
from report_agent.config import AgentConfig
from report_agent.llm_impl import GeminiModelClient, GeminiSearchProvider, OpenAIModelClient, OpenAISearchProvider
from report_agent.prompts import build_initial_request, build_system_prompt
from report_agent.rendering import DocumentRenderer, MarkdownRenderer
from report_agent.survey import SearchProvider, SurveyDataProvider, SurveyDataset, SurveyToolkit, default_dataset

logger = get_logger(__name__)


def build_clients(config: AgentConfig) -> Tuple[ModelClient, SearchProvider]:
    """Build the production model client and search provider for the configured provider.

    Raises:
        ConfigError: If the provider's API key is missing.
    """
    api_key = config.api_key()
    if config.provider == "gemini":
        aclient = genai.Client(api_key=api_key).aio
        return (
            GeminiModelClient(aclient, config.model_name, temp=config.temperature, max_tokens=config.max_tokens),
            GeminiSearchProvider(aclient, config.search_model_name),
        )

    # The loop never retries; neither should the SDK
    client = AsyncOpenAI(api_key=api_key, base_url=config.base_url, max_retries=0)
    return (
        OpenAIModelClient(client, config.model_name, temp=config.temperature, max_tokens=config.max_tokens),
        OpenAISearchProvider(client, config.search_model_name),
    )


def build_agent(
    config: AgentConfig,
    *,
    client: Optional[ModelClient] = None,
    search: Optional[SearchProvider] = None,
    renderer: Optional[DocumentRenderer] = None,
    dataset: Optional[SurveyDataset] = None,
) -> AgentLoop:
    """Wire dataset, provider, toolkit, registry, dispatcher and loop together.

    Collaborators that are not injected are built from the configuration.
    """
    if client is None or search is None:
        default_client, default_search = build_clients(config)
        client = client or default_client
        search = search or default_search

    provider = SurveyDataProvider(dataset or default_dataset(), location=config.location, topic=config.topic)
    toolkit = SurveyToolkit(provider, search, renderer or MarkdownRenderer(config.output_path))
    registry = toolkit.build_registry()
    dispatcher = ToolDispatcher(registry, tool_timeout=config.tool_timeout)

    return AgentLoop(
        client,
        registry,
        dispatcher,
        system_prompt=build_system_prompt(config.location, config.topic),
        max_iterations=config.max_iterations,
    )


async def run_agent(
    config: AgentConfig,
    *,
    client: Optional[ModelClient] = None,
    search: Optional[SearchProvider] = None,
    renderer: Optional[DocumentRenderer] = None,
    dataset: Optional[SurveyDataset] = None,
) -> RunResult:
    """Run one conversation and return its result."""
    loop = build_agent(config, client=client, search=search, renderer=renderer, dataset=dataset)
    logger.info(f"Starting report agent for {config.location} ({config.topic}) with model '{config.model_name}'.")
    result = await loop.run(build_initial_request(config.location, config.topic))
    logger.info(f"Run finished: {result.status.value} in {result.elapsed_seconds}s")
    return result
