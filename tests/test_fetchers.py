"""Tests for the OpenWeatherMap and NewsAPI fetchers using httpx.MockTransport."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from weather_dashboard.config import AppConfig
from weather_dashboard.core.errors import (
    ConfigError,
    ErrorKind,
    NotFoundError,
    RateLimitedError,
    SourceError,
    SourceTimeoutError,
    UnauthorizedError,
    UpstreamMalformedError,
)
from weather_dashboard.fetch.factory import build_sources
from weather_dashboard.fetch.newsapi import NewsApiFetcher, build_search_query
from weather_dashboard.fetch.openweather import (
    OpenWeatherAirQuality,
    OpenWeatherConditions,
    OpenWeatherResolver,
)

from conftest import KIGALI


GEO_URL = "https://api.openweathermap.org/geo/1.0"
DATA_URL = "https://api.openweathermap.org/data/2.5"


def _run(handler, make_fetcher, call):
    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await call(make_fetcher(client))

    return asyncio.run(_go())


def test_resolver_returns_first_match():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=[{"name": "Kigali", "lat": -1.9441, "lon": 30.0619, "country": "RW"}])

    coords = _run(
        handler,
        lambda client: OpenWeatherResolver(client, "secret", GEO_URL),
        lambda resolver: resolver.resolve("Kigali", 10),
    )

    assert coords == KIGALI
    assert seen["path"] == "/geo/1.0/direct"
    assert seen["params"] == {"q": "Kigali", "limit": "1", "appid": "secret"}


def test_resolver_empty_result_is_not_found():
    with pytest.raises(NotFoundError, match='City "Atlantis" not found'):
        _run(
            lambda request: httpx.Response(200, json=[]),
            lambda client: OpenWeatherResolver(client, "secret", GEO_URL),
            lambda resolver: resolver.resolve("Atlantis", 10),
        )


def test_resolver_bad_key_is_unauthorized():
    with pytest.raises(UnauthorizedError, match="Invalid API key for weather service"):
        _run(
            lambda request: httpx.Response(401, json={"cod": 401, "message": "Invalid API key"}),
            lambda client: OpenWeatherResolver(client, "bad", GEO_URL),
            lambda resolver: resolver.resolve("Kigali", 10),
        )


def test_timeout_maps_to_timeout_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    with pytest.raises(SourceTimeoutError) as excinfo:
        _run(
            handler,
            lambda client: OpenWeatherAirQuality(client, "secret", DATA_URL),
            lambda fetcher: fetcher.fetch(KIGALI, 10),
        )
    assert excinfo.value.kind is ErrorKind.TIMEOUT
    assert excinfo.value.message == "Request timed out after 10s"


def test_connection_error_maps_to_unknown():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SourceError) as excinfo:
        _run(
            handler,
            lambda client: OpenWeatherAirQuality(client, "secret", DATA_URL),
            lambda fetcher: fetcher.fetch(KIGALI, 10),
        )
    assert excinfo.value.kind is ErrorKind.UNKNOWN
    assert "ConnectError" in excinfo.value.message


def test_server_error_uses_provider_message():
    with pytest.raises(SourceError, match="HTTP 500: boom"):
        _run(
            lambda request: httpx.Response(500, json={"message": "boom"}),
            lambda client: OpenWeatherAirQuality(client, "secret", DATA_URL),
            lambda fetcher: fetcher.fetch(KIGALI, 10),
        )


def test_invalid_json_is_malformed():
    with pytest.raises(UpstreamMalformedError):
        _run(
            lambda request: httpx.Response(200, content=b"<html>oops</html>"),
            lambda client: OpenWeatherAirQuality(client, "secret", DATA_URL),
            lambda fetcher: fetcher.fetch(KIGALI, 10),
        )


def test_conditions_request_uses_metric_units():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"main": {}})

    payload = _run(
        handler,
        lambda client: OpenWeatherConditions(client, "secret", DATA_URL),
        lambda fetcher: fetcher.fetch(KIGALI, 10),
    )

    assert payload == {"main": {}}
    assert seen["path"] == "/data/2.5/weather"
    assert seen["params"]["units"] == "metric"
    assert seen["params"]["lat"] == "-1.9441"


@pytest.mark.parametrize("value, expected", [(7.5, 8), (2.49, 2), (0, 0)])
def test_uv_index_is_rounded(value, expected):
    uv = _run(
        lambda request: httpx.Response(200, json={"lat": -1.9, "lon": 30.1, "value": value}),
        lambda client: OpenWeatherConditions(client, "secret", DATA_URL),
        lambda fetcher: fetcher.fetch_uv_index(KIGALI, 5),
    )
    assert uv == expected


def test_uv_index_without_value_is_malformed():
    with pytest.raises(UpstreamMalformedError):
        _run(
            lambda request: httpx.Response(200, json={}),
            lambda client: OpenWeatherConditions(client, "secret", DATA_URL),
            lambda fetcher: fetcher.fetch_uv_index(KIGALI, 5),
        )


def test_build_search_query_for_city_and_generic():
    assert build_search_query("Kigali") == (
        '("Kigali" AND (weather OR climate OR storm OR hurricane OR tornado OR flood '
        "OR drought OR heatwave OR blizzard OR rainfall OR temperature))"
    )
    assert build_search_query("weather") == "weather OR climate OR storm OR hurricane OR tornado"
    assert build_search_query(None) == "weather OR climate OR storm OR hurricane OR tornado"


def test_news_fetch_sends_query_and_returns_it():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"status": "ok", "totalResults": 0, "articles": []})

    result = _run(
        handler,
        lambda client: NewsApiFetcher(client, "news-key"),
        lambda fetcher: fetcher.fetch("Kigali", 10),
    )

    assert result["query"] == build_search_query("Kigali")
    assert result["payload"]["articles"] == []
    assert seen["path"] == "/v2/everything"
    assert seen["params"]["sortBy"] == "publishedAt"
    assert seen["params"]["pageSize"] == "10"
    assert seen["params"]["language"] == "en"
    assert seen["params"]["apiKey"] == "news-key"


@pytest.mark.parametrize(
    "status, error_type, message",
    [
        (401, UnauthorizedError, "Invalid API key for news service"),
        (429, RateLimitedError, "News API rate limit exceeded"),
    ],
)
def test_news_error_messages(status, error_type, message):
    with pytest.raises(error_type, match=message):
        _run(
            lambda request: httpx.Response(status, json={"status": "error"}),
            lambda client: NewsApiFetcher(client, "news-key"),
            lambda fetcher: fetcher.fetch("Kigali", 10),
        )


def test_build_sources_requires_api_keys(monkeypatch):
    monkeypatch.delenv("OPENWEATHER_API_KEY", raising=False)
    monkeypatch.delenv("NEWS_API_KEY", raising=False)

    async def _go():
        async with httpx.AsyncClient() as client:
            return build_sources(AppConfig(), client)

    with pytest.raises(ConfigError, match="OPENWEATHER_API_KEY"):
        asyncio.run(_go())


def test_build_sources_from_environment(monkeypatch):
    monkeypatch.setenv("OPENWEATHER_API_KEY", "weather-key")
    monkeypatch.setenv("NEWS_API_KEY", "news-key")

    async def _go():
        async with httpx.AsyncClient() as client:
            return build_sources(AppConfig(), client)

    built = asyncio.run(_go())

    assert isinstance(built.resolver, OpenWeatherResolver)
    assert built.conditions.api_key == "weather-key"
    assert built.news.api_key == "news-key"
    assert built.resolver.base_url == GEO_URL
