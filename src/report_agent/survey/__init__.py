"""Survey dataset, its data provider and the tools exposed to the model."""

from .dataset import NationalBenchmark, OverallRate, RateRecord, SurveyDataset, default_dataset
from .provider import NotFound, SurveyDataProvider
from .search import SearchProvider
from .tools import SurveyToolkit

__all__ = [
    "NationalBenchmark",
    "OverallRate",
    "RateRecord",
    "SurveyDataset",
    "default_dataset",
    "NotFound",
    "SurveyDataProvider",
    "SearchProvider",
    "SurveyToolkit",
]
