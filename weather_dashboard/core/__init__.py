"""
Core domain models and classification rules.

This package contains data types, the error taxonomy and the pure
classifiers, independent of any provider or output format.
"""

from .classifier import (
    AqiLevel,
    ClassificationError,
    categorize_article,
    classify_aqi,
    classify_uv,
)
from .errors import ConfigError, ErrorKind, SourceError
from .types import (
    AirQualitySample,
    Coordinates,
    CurrentConditions,
    DashboardResult,
    Failure,
    ForecastPoint,
    NewsArticle,
    NewsDigest,
    PollutantComponents,
    Success,
)

__all__ = [
    "AirQualitySample",
    "AqiLevel",
    "ClassificationError",
    "ConfigError",
    "Coordinates",
    "CurrentConditions",
    "DashboardResult",
    "ErrorKind",
    "Failure",
    "ForecastPoint",
    "NewsArticle",
    "NewsDigest",
    "PollutantComponents",
    "SourceError",
    "Success",
    "categorize_article",
    "classify_aqi",
    "classify_uv",
]
