"""Builds the resolver and the four source fetchers from runtime config."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from ..config import AppConfig, get_news_api_key, get_weather_api_key
from .base import (
    AirQualityFetcher,
    ConditionsFetcher,
    ForecastFetcher,
    LocationResolver,
    NewsFetcher,
)
from .newsapi import NewsApiFetcher
from .openweather import (
    OpenWeatherAirQuality,
    OpenWeatherConditions,
    OpenWeatherForecast,
    OpenWeatherResolver,
)


@dataclass(frozen=True)
class Sources:
    resolver: LocationResolver
    conditions: ConditionsFetcher
    forecast: ForecastFetcher
    air_quality: AirQualityFetcher
    news: NewsFetcher


def build_sources(cfg: AppConfig, client: httpx.AsyncClient) -> Sources:
    """Build provider instances sharing one client.

    Raises:
        ConfigError: If an API key is missing
    """
    provider = cfg.provider
    weather_key = get_weather_api_key(provider)
    news_key = get_news_api_key(provider)
    return Sources(
        resolver=OpenWeatherResolver(client, weather_key, provider.geocoding_base_url),
        conditions=OpenWeatherConditions(client, weather_key, provider.weather_base_url),
        forecast=OpenWeatherForecast(client, weather_key, provider.weather_base_url),
        air_quality=OpenWeatherAirQuality(client, weather_key, provider.weather_base_url),
        news=NewsApiFetcher(
            client,
            news_key,
            base_url=provider.news_base_url,
            page_size=cfg.news.page_size,
            language=cfg.news.language,
        ),
    )
