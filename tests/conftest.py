from pathlib import Path
from typing import Annotated, Any, Dict
from unittest.mock import AsyncMock

import pytest
from pydantic import Field

from report_agent.agent_core import ToolRegistry
from report_agent.rendering import MarkdownRenderer
from report_agent.survey import SurveyDataProvider, SurveyToolkit, default_dataset


@pytest.fixture
def toy_registry() -> ToolRegistry:
    """Two tiny tools: ``echo`` and the terminal ``finish``."""
    registry = ToolRegistry()

    @registry.tool
    def echo(text: Annotated[str, Field(description="Text to echo")]) -> Dict[str, Any]:
        """Echo the text back."""
        return {"echo": text}

    @registry.tool(terminal=True)
    def finish(path: Annotated[str, Field(description="Where the artifact was written")]) -> Dict[str, Any]:
        """Finish the run."""
        return {"success": True, "file": path}

    return registry


@pytest.fixture
def provider() -> SurveyDataProvider:
    return SurveyDataProvider(default_dataset(), location="Boston, MA", topic="Ever marijuana use")


@pytest.fixture
def search() -> AsyncMock:
    mock = AsyncMock()
    mock.search.return_value = "Medical use legal since 2012; recreational since 2016."
    return mock


@pytest.fixture
def report_path(tmp_path: Path) -> Path:
    return tmp_path / "out" / "weekly_report.md"


@pytest.fixture
def toolkit(provider: SurveyDataProvider, search: AsyncMock, report_path: Path) -> SurveyToolkit:
    return SurveyToolkit(provider, search, MarkdownRenderer(report_path))
