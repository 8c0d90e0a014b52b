"""Tool handlers the model can call, backed by the data provider, web search and the renderer."""

from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import Field

from .provider import NotFound, QueryResult, SurveyDataProvider
from .search import SearchProvider
from report_agent.agent_core import ProviderError, ToolRegistry
from report_agent.agent_core.logger import get_logger
from report_agent.prompts import national_search_query, policy_search_query
from report_agent.rendering import DocumentRenderer, ReportSection, ReportSpec

logger = get_logger(__name__)

Dimension = Literal["grade", "sex", "race"]


class SurveyToolkit:
    """The capabilities offered to the model.

    Handlers only read the provider and configuration, or write through the renderer;
    they never touch the conversation and are safe to call repeatedly with the same input.
    """

    def __init__(
        self,
        provider: SurveyDataProvider,
        search: SearchProvider,
        renderer: DocumentRenderer,
    ) -> None:
        self.provider = provider
        self.search = search
        self.renderer = renderer

    def build_registry(self, registry: Optional[ToolRegistry] = None) -> ToolRegistry:
        """Register every handler; ``generate_report`` is the terminal tool."""
        registry = registry or ToolRegistry()
        registry.register(self.get_available_data)
        registry.register(self.get_overall_rate)
        registry.register(self.get_breakdown)
        registry.register(self.get_historical_trend)
        registry.register(self.get_subgroup_trend)
        registry.register(self.get_policy_context)
        registry.register(self.get_national_comparison)
        registry.register(self.generate_report, terminal=True)
        return registry

    def get_available_data(self) -> Dict[str, Any]:
        """Get metadata about what data is available: years, dimensions, and topics. Call this first to understand what you can analyze."""
        return self.provider.available_data()

    def get_overall_rate(
        self, year: Annotated[str, Field(description="Year to query (e.g., '2017')")]
    ) -> Dict[str, Any]:
        """Get the overall rate for a specific year. Returns rate, sample size, and confidence interval."""
        return _unwrap(self.provider.overall_rate(year))

    def get_breakdown(
        self,
        year: Annotated[str, Field(description="Year to query")],
        dimension: Annotated[Dimension, Field(description="Dimension to break down by: 'grade', 'sex', or 'race'")],
    ) -> Dict[str, Any]:
        """Get rates broken down by a demographic dimension for a specific year."""
        return _unwrap(self.provider.breakdown(year, dimension))

    def get_historical_trend(self) -> Dict[str, Any]:
        """Get the overall rate trend across all available years. Use this to identify long-term patterns."""
        return self.provider.historical_trend()

    def get_subgroup_trend(
        self,
        dimension: Annotated[Dimension, Field(description="Dimension the subgroup belongs to")],
        subgroup: Annotated[
            str, Field(description="The specific subgroup (e.g., '8th', 'Female', 'Hispanic or Latino')")
        ],
    ) -> Dict[str, Any]:
        """Get the historical trend for a specific subgroup (e.g., '8th' grade or 'Female'). Use when you spot a concerning value and want to see if it's part of a pattern."""
        return _unwrap(self.provider.subgroup_trend(dimension, subgroup))

    async def get_policy_context(self) -> Dict[str, Any]:
        """Get relevant policy changes that might explain trends in the data."""
        summary = await self.search.search(policy_search_query(self.provider.location, self.provider.topic))
        return {
            "source": "web_search",
            "location": self.provider.location,
            "policy_summary": summary,
            "known_policy_changes": self.provider.policy_changes(),
        }

    async def get_national_comparison(
        self, year: Annotated[str, Field(description="Year to compare")]
    ) -> Dict[str, Any]:
        """Compare local rates to national averages for context."""
        summary = await self.search.search(national_search_query(year, self.provider.topic))
        benchmark = self.provider.national_benchmark(year)
        return {
            "source": "web_search",
            "year": year,
            "local_rate": self.provider.local_rate(year),
            "national_data": summary,
            "recorded_benchmark": benchmark.model_dump() if benchmark else None,
        }

    def generate_report(
        self,
        title: Annotated[str, Field(description="Report title", min_length=1)],
        sections: Annotated[
            List[ReportSection],
            Field(
                description="Report sections. You decide what sections to include based on your analysis.",
                min_length=1,
            ),
        ],
        subtitle: Annotated[Optional[str], Field(description="Report subtitle with date range and location")] = None,
        executive_summary: Annotated[Optional[str], Field(description="2-3 sentence executive summary")] = None,
        recommendations: Annotated[
            Optional[List[str]], Field(description="List of actionable recommendations")
        ] = None,
        methodology_notes: Annotated[
            Optional[str], Field(description="Notes on data sources and limitations")
        ] = None,
    ) -> Dict[str, Any]:
        """Generate the final report document. Call this only after you have completed your analysis. You control the report structure."""
        spec = ReportSpec(
            title=title,
            subtitle=subtitle,
            executive_summary=executive_summary,
            sections=sections,
            recommendations=recommendations or [],
            methodology_notes=methodology_notes,
        )
        path = self.renderer.render(spec)
        return {"success": True, "file": str(path)}


def _unwrap(result: QueryResult) -> Dict[str, Any]:
    if isinstance(result, NotFound):
        raise ProviderError(result.message, guidance=result.valid)
    return result
