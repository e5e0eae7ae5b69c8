"""
Dashboard aggregation engine.

Resolves a city once and runs four independent source branches
concurrently (current conditions, forecast, air quality, news), joining
them with a wait-for-all gather:

1. Start news on the raw city text alongside resolution; the three
   coordinate-based sources start once the city resolves, and fail with the
   resolution message when it does not
2. Run each branch under its own timeout; no branch cancels another
3. Capture every SourceError as a Failure, normalise every payload through
   the classifier
4. Assemble a DashboardResult whose errors follow SOURCE_ORDER

ClassificationError is a defect, not a source failure: it is re-raised once
all branches have finished.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
import logging
import time
from typing import Any, Awaitable, Callable, TypeVar

from .config import TimeoutConfig
from .core.classifier import (
    ClassificationError,
    categorize_article,
    classify_aqi,
    classify_uv,
)
from .core.errors import SourceError, SourceTimeoutError, UpstreamMalformedError
from .core.types import (
    AIR_QUALITY,
    FORECAST,
    NEWS,
    SOURCE_ORDER,
    WEATHER,
    AirQualitySample,
    Coordinates,
    CurrentConditions,
    DashboardResult,
    Failure,
    ForecastPoint,
    NewsArticle,
    NewsDigest,
    PollutantComponents,
    SourceOutcome,
    Success,
)
from .fetch.base import (
    AirQualityFetcher,
    ConditionsFetcher,
    ForecastFetcher,
    LocationResolver,
    NewsFetcher,
    Payload,
)
from .utils.convert import from_epoch, iso_utc, round_half_up, utc_now
from .utils.logging import get_logger, log_event


T = TypeVar("T")

LOCATION = "location"

# UV enrichment falls back to this value (bucket "moderate") on any failure.
DEFAULT_UV_INDEX = 5

DEFAULT_FORECAST_POINTS = 8
DEFAULT_NEWS_ARTICLES = 6


@dataclass(frozen=True)
class Timeouts:
    """Per-call timeouts in seconds."""

    geocoding: float = 10.0
    weather: float = 10.0
    forecast: float = 10.0
    air_quality: float = 10.0
    news: float = 10.0
    uv: float = 5.0

    @classmethod
    def from_config(cls, cfg: TimeoutConfig) -> "Timeouts":
        return cls(
            geocoding=cfg.geocoding_seconds,
            weather=cfg.weather_seconds,
            forecast=cfg.forecast_seconds,
            air_quality=cfg.air_quality_seconds,
            news=cfg.news_seconds,
            uv=cfg.uv_seconds,
        )


async def optional_enrichment(
    call: Callable[[], Awaitable[T]],
    default: T,
    timeout: float,
    *,
    name: str,
    accept: Callable[[T], bool] | None = None,
    logger: logging.Logger | None = None,
) -> T:
    """Await an optional sub-call, returning `default` if it does not deliver.

    Timeouts, errors of any kind and values rejected by `accept` all produce
    the default. Nothing is reported to the caller besides a warning log.
    """
    try:
        value = await asyncio.wait_for(call(), timeout)
    except asyncio.TimeoutError:
        reason = f"timed out after {timeout:g}s"
    except SourceError as exc:
        reason = exc.message
    except Exception as exc:  # noqa: BLE001
        reason = f"{type(exc).__name__}: {exc}"
    else:
        if accept is None or accept(value):
            return value
        reason = f"rejected value {value!r}"
    log_event(
        logger,
        f"{name} unavailable, using default",
        level=logging.WARNING,
        event="enrichment_default",
        enrichment=name,
        reason=reason,
        default=default,
    )
    return default


def _valid_uv(value: Any) -> bool:
    try:
        classify_uv(value)
    except ClassificationError:
        return False
    return True


# Normalisation ----------------------------------------------------------


def to_current_conditions(payload: Payload, coords: Coordinates, uv_index: int) -> CurrentConditions:
    main = payload["main"]
    weather = payload["weather"][0]
    wind = payload.get("wind") or {}
    clouds = payload.get("clouds") or {}
    visibility = payload.get("visibility")
    return CurrentConditions(
        temperature=round_half_up(main["temp"]),
        feels_like=round_half_up(main["feels_like"]),
        humidity=main["humidity"],
        pressure=main["pressure"],
        visibility=visibility / 1000 if visibility is not None else None,
        wind_speed=wind.get("speed") or 0,
        wind_direction=wind.get("deg") or 0,
        cloud_cover=clouds.get("all") or 0,
        condition=weather["main"],
        description=weather["description"],
        icon=weather.get("icon", ""),
        uv_index=uv_index,
        uv_severity=classify_uv(uv_index),
        location=coords,
    )


def to_forecast(payload: Payload, limit: int = DEFAULT_FORECAST_POINTS) -> tuple[ForecastPoint, ...]:
    points = []
    for item in payload["list"][:limit]:
        weather = item["weather"][0]
        points.append(
            ForecastPoint(
                datetime=from_epoch(item["dt"]),
                temperature=round_half_up(item["main"]["temp"]),
                humidity=item["main"]["humidity"],
                wind_speed=(item.get("wind") or {}).get("speed") or 0,
                condition=weather["main"],
                description=weather["description"],
                icon=weather.get("icon", ""),
                precipitation_probability=item.get("pop", 0) * 100,
            )
        )
    return tuple(points)


def to_air_quality(payload: Payload) -> AirQualitySample:
    entry = payload["list"][0]
    aqi = entry["main"]["aqi"]
    level = classify_aqi(aqi)
    components = entry["components"]
    return AirQualitySample(
        aqi=aqi,
        level=level.level,
        color=level.color,
        description=level.description,
        components=PollutantComponents(
            co=float(components["co"]),
            no=float(components.get("no", 0.0)),
            no2=float(components["no2"]),
            o3=float(components["o3"]),
            so2=float(components["so2"]),
            pm2_5=float(components["pm2_5"]),
            pm10=float(components["pm10"]),
            nh3=float(components.get("nh3", 0.0)),
        ),
    )


def to_news_digest(result: Payload, limit: int = DEFAULT_NEWS_ARTICLES) -> NewsDigest:
    data = result["payload"]
    kept = [
        article
        for article in data["articles"]
        if article.get("title") and article.get("description") and article.get("url")
    ][:limit]
    articles = tuple(
        NewsArticle(
            title=article["title"],
            description=article["description"],
            url=article["url"],
            source=(article.get("source") or {}).get("name") or "",
            published_at=article.get("publishedAt") or "",
            image_url=article.get("urlToImage"),
            category=categorize_article(f"{article['title']} {article['description']}"),
        )
        for article in kept
    )
    # Capped by the filtered count, even when the provider reports fewer.
    reported = data.get("totalResults")
    total = len(articles) if reported is None else min(len(articles), int(reported))
    return NewsDigest(query=result["query"], total_results=total, articles=articles)


def _normalise(source: str, fn: Callable[..., T], *args: Any) -> T:
    try:
        return fn(*args)
    except ClassificationError:
        raise
    except (KeyError, IndexError, TypeError, ValueError, AttributeError, ArithmeticError) as exc:
        raise UpstreamMalformedError(
            f"Unexpected {source} payload: {type(exc).__name__}: {exc}"
        ) from exc


# Engine -----------------------------------------------------------------


class DashboardEngine:
    """Concurrent fan-out over the four dashboard sources.

    All collaborators are injected; the engine keeps no state between calls.
    """

    def __init__(
        self,
        resolver: LocationResolver,
        conditions: ConditionsFetcher,
        forecast: ForecastFetcher,
        air_quality: AirQualityFetcher,
        news: NewsFetcher,
        timeouts: Timeouts | None = None,
        forecast_points: int = DEFAULT_FORECAST_POINTS,
        news_articles: int = DEFAULT_NEWS_ARTICLES,
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.resolver = resolver
        self.conditions = conditions
        self.forecast_fetcher = forecast
        self.air_quality_fetcher = air_quality
        self.news_fetcher = news
        self.timeouts = timeouts or Timeouts()
        self.forecast_points = forecast_points
        self.news_articles = news_articles
        self.logger = logger or get_logger("engine")
        self.clock = clock

    async def aggregate(self, city: str) -> DashboardResult:
        """Build the dashboard for a city.

        Source failures never raise; they appear as None slots plus an entry
        in `errors`. Only a ClassificationError escapes.
        """
        started = time.perf_counter()
        located, news = await asyncio.gather(
            self._located_branches(city),
            self._capture(NEWS, self._news(city)),
            return_exceptions=True,
        )
        if isinstance(located, BaseException):
            raise located
        outcomes: dict[str, Any] = {**located, NEWS: news}
        for outcome in outcomes.values():
            if isinstance(outcome, BaseException):
                raise outcome

        result = _assemble(city, iso_utc(self.clock()), outcomes)
        log_event(
            self.logger,
            "Dashboard aggregated",
            event="dashboard_aggregated",
            city=city,
            elapsed_ms=round((time.perf_counter() - started) * 1000),
            failed_sources=result.failed_sources(),
        )
        return result

    # Single-source operations raise SourceError instead of capturing it.

    async def current(self, city: str) -> CurrentConditions:
        return await self._current(await self._locate(city))

    async def forecast(self, city: str) -> tuple[ForecastPoint, ...]:
        return await self._forecast(await self._locate(city))

    async def air_quality(self, city: str) -> AirQualitySample:
        return await self._air_quality(await self._locate(city))

    async def news(self, query: str) -> NewsDigest:
        return await self._news(query)

    # Branches ------------------------------------------------------------

    async def _located_branches(self, city: str) -> dict[str, Any]:
        """Resolve the city, then run the coordinate-based branches.

        Values are outcomes, or the exception a branch raised past _capture.
        """
        located = await self._capture(LOCATION, self._locate(city))
        branches = {
            WEATHER: self._current,
            FORECAST: self._forecast,
            AIR_QUALITY: self._air_quality,
        }
        if isinstance(located, Failure):
            return {source: Failure(source, located.message, located.kind) for source in branches}
        settled = await asyncio.gather(
            *(self._capture(source, branch(located.payload)) for source, branch in branches.items()),
            return_exceptions=True,
        )
        return dict(zip(branches, settled))

    async def _locate(self, city: str) -> Coordinates:
        return await _bounded(self.resolver.resolve(city, self.timeouts.geocoding), self.timeouts.geocoding)

    async def _current(self, coords: Coordinates) -> CurrentConditions:
        payload = await _bounded(self.conditions.fetch(coords, self.timeouts.weather), self.timeouts.weather)
        uv_index = await optional_enrichment(
            lambda: self.conditions.fetch_uv_index(coords, self.timeouts.uv),
            DEFAULT_UV_INDEX,
            self.timeouts.uv,
            name="uv_index",
            accept=_valid_uv,
            logger=self.logger,
        )
        return _normalise(WEATHER, to_current_conditions, payload, coords, uv_index)

    async def _forecast(self, coords: Coordinates) -> tuple[ForecastPoint, ...]:
        payload = await _bounded(
            self.forecast_fetcher.fetch(coords, self.timeouts.forecast), self.timeouts.forecast
        )
        return _normalise(FORECAST, to_forecast, payload, self.forecast_points)

    async def _air_quality(self, coords: Coordinates) -> AirQualitySample:
        payload = await _bounded(
            self.air_quality_fetcher.fetch(coords, self.timeouts.air_quality),
            self.timeouts.air_quality,
        )
        return _normalise(AIR_QUALITY, to_air_quality, payload)

    async def _news(self, query: str) -> NewsDigest:
        payload = await _bounded(self.news_fetcher.fetch(query, self.timeouts.news), self.timeouts.news)
        return _normalise(NEWS, to_news_digest, payload, self.news_articles)

    async def _capture(self, source: str, operation: Awaitable[T]) -> SourceOutcome[T]:
        try:
            return Success(await operation)
        except SourceError as exc:
            log_event(
                self.logger,
                f"{source} failed: {exc.message}",
                level=logging.WARNING,
                event="source_failed",
                source=source,
                kind=exc.kind.value,
            )
            return Failure(source, exc.message, exc.kind)


async def _bounded(call: Awaitable[T], timeout: float) -> T:
    """Await a fetcher call under a timeout, converting stray errors to SourceError."""
    try:
        return await asyncio.wait_for(call, timeout)
    except asyncio.TimeoutError as exc:
        raise SourceTimeoutError(f"Request timed out after {timeout:g}s") from exc
    except (SourceError, ClassificationError):
        raise
    except Exception as exc:  # noqa: BLE001
        raise SourceError(f"{type(exc).__name__}: {exc}") from exc


def _assemble(city: str, timestamp: str, outcomes: dict[str, SourceOutcome[Any]]) -> DashboardResult:
    def value(source: str) -> Any:
        outcome = outcomes[source]
        return outcome.payload if isinstance(outcome, Success) else None

    errors = tuple(
        outcomes[source].describe()
        for source in SOURCE_ORDER
        if isinstance(outcomes[source], Failure)
    )
    return DashboardResult(
        city=city,
        timestamp=timestamp,
        weather=value(WEATHER),
        forecast=value(FORECAST),
        air_quality=value(AIR_QUALITY),
        news=value(NEWS),
        errors=errors,
    )
