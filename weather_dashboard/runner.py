"""
Run orchestration for the Weather Dashboard.

This module wires configuration, the shared HTTP client, the provider
fetchers and the aggregation engine together:
1. Build one httpx.AsyncClient for the run
2. Build the resolver and fetchers from config (API keys checked here)
3. Run the engine inside asyncio.run()

The CLI calls run_dashboard() and run_single(); tests replace the fetchers
by building DashboardEngine directly.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from .config import AppConfig
from .engine import DashboardEngine, Timeouts
from .fetch.factory import Sources, build_sources
from .fetch.http import build_client
from .core.types import DashboardResult


SINGLE_SOURCES = ("weather", "forecast", "air-quality", "news")


def build_engine(sources: Sources, cfg: AppConfig, logger: logging.Logger | None = None) -> DashboardEngine:
    """Create an engine from already-built sources and runtime config."""
    return DashboardEngine(
        resolver=sources.resolver,
        conditions=sources.conditions,
        forecast=sources.forecast,
        air_quality=sources.air_quality,
        news=sources.news,
        timeouts=Timeouts.from_config(cfg.timeouts),
        forecast_points=cfg.forecast.max_points,
        news_articles=cfg.news.max_articles,
        logger=logger,
    )


def run_dashboard(city: str, cfg: AppConfig, logger: logging.Logger | None = None) -> DashboardResult:
    """Aggregate every source for a city.

    Raises:
        ConfigError: If an API key is missing
    """
    return asyncio.run(_with_engine(cfg, logger, lambda engine: engine.aggregate(city)))


def run_single(source: str, target: str | None, cfg: AppConfig, logger: logging.Logger | None = None) -> Any:
    """Fetch one source and return its slot value.

    Args:
        source: One of SINGLE_SOURCES
        target: City name, or news query (defaults to cfg.news.default_query)
        cfg: Application configuration
        logger: Optional logger passed to the engine

    Raises:
        ValueError: If source is unknown
        ConfigError: If an API key is missing
        SourceError: If the upstream call fails
    """
    operations: dict[str, Callable[[DashboardEngine], Any]] = {
        "weather": lambda engine: engine.current(target),
        "forecast": lambda engine: engine.forecast(target),
        "air-quality": lambda engine: engine.air_quality(target),
        "news": lambda engine: engine.news(target or cfg.news.default_query),
    }
    if source not in operations:
        raise ValueError(f"Unsupported source: {source}. Supported: {', '.join(SINGLE_SOURCES)}")
    return asyncio.run(_with_engine(cfg, logger, operations[source]))


async def _with_engine(cfg: AppConfig, logger, operation):
    async with build_client(cfg.provider.user_agent, cfg.provider.trust_env) as client:
        engine = build_engine(build_sources(cfg, client), cfg, logger)
        return await operation(engine)
