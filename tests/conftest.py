"""Deterministic fake sources and provider payloads for engine tests."""

from __future__ import annotations

import asyncio
import copy
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import pytest

from weather_dashboard.core.types import Coordinates
from weather_dashboard.engine import DashboardEngine, Timeouts
from weather_dashboard.fetch.base import (
    AirQualityFetcher,
    ConditionsFetcher,
    ForecastFetcher,
    LocationResolver,
    NewsFetcher,
)


FIXED_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

KIGALI = Coordinates(lat=-1.9441, lon=30.0619, name="Kigali", country="RW")

CURRENT_PAYLOAD = {
    "main": {"temp": 21.5, "feels_like": 20.4, "humidity": 60, "pressure": 1012},
    "visibility": 10000,
    "wind": {"speed": 3.1, "deg": 140},
    "clouds": {"all": 40},
    "weather": [{"main": "Clouds", "description": "scattered clouds", "icon": "03d"}],
}

FORECAST_PAYLOAD = {
    "list": [
        {
            "dt": 1760875200 + i * 10800,
            "main": {"temp": 18 + i, "humidity": 70 - i},
            "wind": {"speed": 2.0 + i},
            "weather": [{"main": "Rain", "description": "light rain", "icon": "10d"}],
            "pop": 0.5,
        }
        for i in range(10)
    ]
}

AIR_QUALITY_PAYLOAD = {
    "list": [
        {
            "main": {"aqi": 3},
            "components": {
                "co": 230.3,
                "no": 0.1,
                "no2": 12.0,
                "o3": 68.2,
                "so2": 1.5,
                "pm2_5": 14.7,
                "pm10": 20.1,
                "nh3": 0.9,
            },
        }
    ]
}

NEWS_RESULT = {
    "query": '("Kigali" AND (weather OR climate))',
    "payload": {
        "totalResults": 42,
        "articles": [
            {
                "title": "Hurricane season outlook",
                "description": "Officials warn emissions are rising too",
                "url": "https://example.com/hurricane",
                "source": {"name": "Example News"},
                "publishedAt": "2026-10-19T10:00:00Z",
                "urlToImage": "https://example.com/hurricane.jpg",
            },
            {
                "title": "Cutting emissions in cities",
                "description": "A new plan for cleaner air",
                "url": "https://example.com/emissions",
                "source": {"name": "Green Daily"},
                "publishedAt": "2026-10-19T09:00:00Z",
                "urlToImage": None,
            },
            {
                "title": "No description here",
                "description": None,
                "url": "https://example.com/skip",
                "source": {"name": "Skipped"},
                "publishedAt": "2026-10-19T08:00:00Z",
            },
            {
                "title": "Farmers prepare for harvest",
                "description": "Dry weeks ahead",
                "url": "https://example.com/harvest",
                "source": {"name": "Agri Wire"},
                "publishedAt": "2026-10-18T08:00:00Z",
            },
            {
                "title": "Sunny afternoon in the capital",
                "description": "People enjoy the parks",
                "url": "https://example.com/sunny",
                "source": {"name": "City Post"},
                "publishedAt": "2026-10-17T08:00:00Z",
            },
        ],
    },
}


class _Controlled:
    """Returns a payload or raises an error after an optional delay."""

    def __init__(self, payload: Any = None, error: BaseException | None = None, delay: float = 0.0):
        self.payload = payload
        self.error = error
        self.delay = delay
        self.calls: list[Any] = []
        self.completed = False

    async def _respond(self, arg: Any) -> Any:
        self.calls.append(arg)
        await asyncio.sleep(self.delay)
        self.completed = True
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.payload)


class FakeResolver(_Controlled, LocationResolver):
    async def resolve(self, name: str, timeout: float) -> Coordinates:
        return await self._respond(name)


class FakeConditions(_Controlled, ConditionsFetcher):
    def __init__(self, *args, uv: Any = 7, uv_error: BaseException | None = None, uv_delay: float = 0.0, **kwargs):
        super().__init__(*args, **kwargs)
        self.uv = uv
        self.uv_error = uv_error
        self.uv_delay = uv_delay
        self.uv_calls = 0

    async def fetch(self, coords: Coordinates, timeout: float):
        return await self._respond(coords)

    async def fetch_uv_index(self, coords: Coordinates, timeout: float) -> int:
        self.uv_calls += 1
        await asyncio.sleep(self.uv_delay)
        if self.uv_error is not None:
            raise self.uv_error
        return self.uv


class FakeForecast(_Controlled, ForecastFetcher):
    async def fetch(self, coords: Coordinates, timeout: float):
        return await self._respond(coords)


class FakeAirQuality(_Controlled, AirQualityFetcher):
    async def fetch(self, coords: Coordinates, timeout: float):
        return await self._respond(coords)


class FakeNews(_Controlled, NewsFetcher):
    async def fetch(self, query: str, timeout: float):
        return await self._respond(query)


@dataclass
class FakeSources:
    resolver: FakeResolver
    conditions: FakeConditions
    forecast: FakeForecast
    air_quality: FakeAirQuality
    news: FakeNews

    def by_source(self, source: str) -> _Controlled:
        return {
            "weather": self.conditions,
            "forecast": self.forecast,
            "airQuality": self.air_quality,
            "news": self.news,
        }[source]


@pytest.fixture
def sources() -> FakeSources:
    return FakeSources(
        resolver=FakeResolver(KIGALI),
        conditions=FakeConditions(CURRENT_PAYLOAD),
        forecast=FakeForecast(FORECAST_PAYLOAD),
        air_quality=FakeAirQuality(AIR_QUALITY_PAYLOAD),
        news=FakeNews(NEWS_RESULT),
    )


@pytest.fixture
def make_engine(sources: FakeSources):
    def _make(timeouts: Timeouts | None = None, clock=lambda: FIXED_NOW) -> DashboardEngine:
        kwargs = {"clock": clock} if clock is not None else {}
        return DashboardEngine(
            resolver=sources.resolver,
            conditions=sources.conditions,
            forecast=sources.forecast,
            air_quality=sources.air_quality,
            news=sources.news,
            timeouts=timeouts,
            **kwargs,
        )

    return _make
