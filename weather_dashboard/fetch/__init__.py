"""
Upstream integrations.

This package contains the location resolver and source fetchers for
OpenWeatherMap and NewsAPI, built on a shared httpx.AsyncClient.
"""

from .base import (
    AirQualityFetcher,
    ConditionsFetcher,
    ForecastFetcher,
    LocationResolver,
    NewsFetcher,
)
from .factory import Sources, build_sources
from .http import build_client, get_json

__all__ = [
    "AirQualityFetcher",
    "ConditionsFetcher",
    "ForecastFetcher",
    "LocationResolver",
    "NewsFetcher",
    "Sources",
    "build_client",
    "build_sources",
    "get_json",
]
