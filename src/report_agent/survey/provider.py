"""Read-only queries over a SurveyDataset."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .dataset import NationalBenchmark, SurveyDataset
from report_agent.agent_core.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class NotFound:
    """Structured "no such key" answer, listing the keys that do exist."""

    message: str
    valid: Dict[str, List[str]] = field(default_factory=dict)


QueryResult = Union[Dict[str, Any], NotFound]


class SurveyDataProvider:
    """Answers the questions the agent may ask about the dataset.

    Unknown years, dimensions or subgroups produce a `NotFound` value rather than an
    exception so callers can pass the valid keys back to the model.
    """

    def __init__(self, dataset: SurveyDataset, *, location: str, topic: str) -> None:
        self.dataset = dataset
        self.location = location
        self.topic = topic

    def available_data(self) -> Dict[str, Any]:
        return {
            "location": self.location,
            "topic": self.topic,
            "available_years": list(self.dataset.available_years),
            "available_dimensions": list(self.dataset.dimensions),
            "notes": self.dataset.source_note,
        }

    def overall_rate(self, year: str) -> QueryResult:
        record = self.dataset.overall.get(year)
        if record is None:
            return self._unknown_year(year)
        return {"year": year, **record.model_dump()}

    def breakdown(self, year: str, dimension: str) -> QueryResult:
        by_year = self.dataset.breakdowns.get(dimension)
        if by_year is None:
            return self._unknown_dimension(dimension)
        subgroups = by_year.get(year)
        if subgroups is None:
            return self._unknown_year(year)
        return {
            "year": year,
            "dimension": dimension,
            "data": {name: record.model_dump() for name, record in subgroups.items()},
        }

    def historical_trend(self) -> Dict[str, Any]:
        years = [y for y in self.dataset.available_years if y in self.dataset.overall]
        trend = [{"year": y, **self.dataset.overall[y].model_dump()} for y in years]
        total_change = None
        if len(years) >= 2:
            total_change = round(self.dataset.overall[years[-1]].value - self.dataset.overall[years[0]].value, 1)
        return {"trend": trend, "years_covered": years, "total_change": total_change}

    def subgroup_trend(self, dimension: str, subgroup: str) -> QueryResult:
        by_year = self.dataset.breakdowns.get(dimension)
        if by_year is None:
            return self._unknown_dimension(dimension)

        known = self._subgroups(dimension)
        if subgroup not in known:
            return NotFound(
                message=f"Subgroup '{subgroup}' not found for dimension '{dimension}'. "
                f"Available subgroups: {', '.join(known)}",
                valid={"available_subgroups": known},
            )

        trend: List[Dict[str, Any]] = []
        values: List[Optional[float]] = []
        for year in self.dataset.available_years:
            record = by_year.get(year, {}).get(subgroup)
            if record is None:
                trend.append({"year": year, "error": "Subgroup not found"})
                values.append(None)
            else:
                trend.append({"year": year, **record.model_dump()})
                values.append(record.value)

        total_change = None
        if values and all(v is not None for v in values):
            total_change = round(values[-1] - values[0], 1)  # type: ignore[operator]

        return {"subgroup": subgroup, "dimension": dimension, "trend": trend, "total_change": total_change}

    def policy_changes(self) -> List[Dict[str, str]]:
        return [{"year": year, "change": text} for year, text in sorted(self.dataset.policy_changes.items())]

    def national_benchmark(self, year: str) -> Optional[NationalBenchmark]:
        return self.dataset.national_comparison.get(year)

    def local_rate(self, year: str) -> Optional[float]:
        record = self.dataset.overall.get(year)
        return record.value if record else None

    def _subgroups(self, dimension: str) -> List[str]:
        names: Dict[str, None] = {}
        for subgroups in self.dataset.breakdowns.get(dimension, {}).values():
            names.update(dict.fromkeys(subgroups))
        return list(names)

    def _unknown_year(self, year: str) -> NotFound:
        years = list(self.dataset.available_years)
        logger.debug(f"Unknown year requested: {year}")
        return NotFound(
            message=f"Year {year} not available. Available years: {', '.join(years)}",
            valid={"available_years": years},
        )

    def _unknown_dimension(self, dimension: str) -> NotFound:
        dimensions = list(self.dataset.dimensions)
        return NotFound(
            message=f"Dimension '{dimension}' not available. Available dimensions: {', '.join(dimensions)}",
            valid={"available_dimensions": dimensions},
        )
