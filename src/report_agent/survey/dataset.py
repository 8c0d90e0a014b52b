"""Immutable survey dataset: overall rates, demographic breakdowns and context notes."""

from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict


class RateRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: float
    sample_size: int


class OverallRate(RateRecord):
    ci_low: float
    ci_high: float


class NationalBenchmark(BaseModel):
    model_config = ConfigDict(frozen=True)

    national_rate: float
    state_rank: int


class SurveyDataset(BaseModel):
    """A survey of one topic in one location, keyed by year and demographic dimension.

    Attributes:
        source_note: Where the data comes from and how often it is collected.
        available_years: Survey years in chronological order.
        overall: Overall rate per year.
        breakdowns: dimension -> year -> subgroup -> rate.
        policy_changes: year -> description of a relevant policy change.
        national_comparison: year -> recorded national benchmark.
    """

    model_config = ConfigDict(frozen=True)

    source_note: str
    available_years: Tuple[str, ...]
    overall: Dict[str, OverallRate]
    breakdowns: Dict[str, Dict[str, Dict[str, RateRecord]]]
    policy_changes: Dict[str, str] = {}
    national_comparison: Dict[str, NationalBenchmark] = {}

    @property
    def dimensions(self) -> Tuple[str, ...]:
        return tuple(self.breakdowns)


def _rates(**subgroups: Tuple[float, int]) -> Dict[str, RateRecord]:
    return {name: RateRecord(value=value, sample_size=size) for name, (value, size) in subgroups.items()}


def default_dataset() -> SurveyDataset:
    """Youth Risk Behavior Survey demonstration data (Boston, MA; ever marijuana use)."""
    hispanic, black = "Hispanic or Latino", "Black or African American"
    return SurveyDataset(
        source_note="Data comes from Youth Risk Behavior Survey (YRBS). Survey conducted every 2 years.",
        available_years=("2011", "2013", "2015", "2017", "2019"),
        overall={
            "2011": OverallRate(value=8.4, sample_size=1180, ci_low=7.2, ci_high=9.6),
            "2013": OverallRate(value=9.8, sample_size=1250, ci_low=8.5, ci_high=11.1),
            "2015": OverallRate(value=11.2, sample_size=1350, ci_low=9.8, ci_high=12.6),
            "2017": OverallRate(value=12.6, sample_size=1403, ci_low=11.1, ci_high=14.1),
            "2019": OverallRate(value=14.1, sample_size=1520, ci_low=12.5, ci_high=15.7),
        },
        breakdowns={
            "grade": {
                "2011": _rates(**{"6th": (5.2, 320), "7th": (8.1, 410), "8th": (12.1, 440)}),
                "2013": _rates(**{"6th": (6.1, 340), "7th": (9.5, 445), "8th": (13.8, 455)}),
                "2015": _rates(**{"6th": (7.8, 380), "7th": (11.1, 485), "8th": (14.9, 470)}),
                "2017": _rates(**{"6th": (9.0, 394), "7th": (12.7, 504), "8th": (16.5, 490)}),
                "2019": _rates(**{"6th": (10.2, 420), "7th": (14.0, 540), "8th": (18.1, 550)}),
            },
            "sex": {
                "2011": _rates(Female=(8.9, 590), Male=(7.8, 585)),
                "2013": _rates(Female=(10.5, 625), Male=(9.0, 620)),
                "2015": _rates(Female=(12.1, 680), Male=(10.2, 665)),
                "2017": _rates(Female=(14.8, 703), Male=(10.5, 694)),
                "2019": _rates(Female=(16.2, 760), Male=(12.0, 755)),
            },
            "race": {
                "2011": _rates(**{hispanic: (11.2, 520), black: (8.1, 280), "White": (5.9, 130), "Asian": (3.8, 95)}),
                "2013": _rates(**{hispanic: (12.8, 560), black: (9.5, 290), "White": (6.5, 140), "Asian": (4.2, 105)}),
                "2015": _rates(**{hispanic: (14.5, 610), black: (10.8, 305), "White": (7.2, 148), "Asian": (4.9, 118)}),
                "2017": _rates(**{hispanic: (16.8, 638), black: (11.9, 312), "White": (6.8, 155), "Asian": (5.3, 123)}),
                "2019": _rates(**{hispanic: (18.5, 680), black: (13.2, 340), "White": (8.1, 170), "Asian": (6.0, 135)}),
            },
        },
        policy_changes={
            "2012": "Massachusetts legalized medical marijuana",
            "2016": "Massachusetts legalized recreational marijuana (Nov 2016)",
        },
        national_comparison={
            "2017": NationalBenchmark(national_rate=14.0, state_rank=28),
            "2019": NationalBenchmark(national_rate=15.2, state_rank=25),
        },
    )
