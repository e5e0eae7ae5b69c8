"""
Core data types for the Weather Dashboard.

This module defines the values produced while building one dashboard:
- Coordinates: Resolved location shared by the coordinate-based sources
- Success / Failure: Outcome of one source fetch (SourceOutcome)
- CurrentConditions, ForecastPoint, AirQualitySample, NewsDigest: Slot values
- DashboardResult: The aggregate returned to presentation layers

Every value is frozen and created fresh per request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from .errors import ErrorKind


T = TypeVar("T")

WEATHER = "weather"
FORECAST = "forecast"
AIR_QUALITY = "airQuality"
NEWS = "news"

# Order of entries in DashboardResult.errors.
SOURCE_ORDER = (WEATHER, FORECAST, AIR_QUALITY, NEWS)


@dataclass(frozen=True)
class Coordinates:
    """Location returned by the resolver.

    Attributes:
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees
        name: Canonical display name of the place
        country: ISO country code, empty when the resolver omits it
    """

    lat: float
    lon: float
    name: str
    country: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "country": self.country,
            "coordinates": {"lat": self.lat, "lon": self.lon},
        }


@dataclass(frozen=True)
class Success(Generic[T]):
    payload: T


@dataclass(frozen=True)
class Failure:
    """A source that did not produce a slot value.

    Attributes:
        source: Source name (one of SOURCE_ORDER)
        message: Human-readable reason
        kind: ErrorKind of the underlying error
    """

    source: str
    message: str
    kind: ErrorKind = ErrorKind.UNKNOWN

    def describe(self) -> str:
        return f"{self.source}: {self.message}"


SourceOutcome = Union[Success[T], Failure]


@dataclass(frozen=True)
class CurrentConditions:
    """Current weather at the resolved location.

    Attributes:
        temperature: Air temperature in Celsius, rounded
        feels_like: Apparent temperature in Celsius, rounded
        humidity: Relative humidity in percent
        pressure: Sea-level pressure in hPa
        visibility: Visibility in kilometres, None when not reported
        wind_speed: Wind speed in m/s
        wind_direction: Wind direction in degrees
        cloud_cover: Cloud cover in percent
        condition: Short condition group (e.g. "Rain")
        description: Longer condition text
        icon: Provider icon code
        uv_index: Integer UV index
        uv_severity: UV bucket (low, moderate, high, very-high, extreme)
        location: Coordinates the conditions were fetched for
    """

    temperature: int
    feels_like: int
    humidity: float
    pressure: float
    visibility: float | None
    wind_speed: float
    wind_direction: float
    cloud_cover: float
    condition: str
    description: str
    icon: str
    uv_index: int
    uv_severity: str
    location: Coordinates

    def to_dict(self) -> dict[str, Any]:
        return {
            "location": self.location.to_dict(),
            "current": {
                "temperature": self.temperature,
                "feelsLike": self.feels_like,
                "humidity": self.humidity,
                "pressure": self.pressure,
                "visibility": self.visibility,
                "uvIndex": self.uv_index,
                "uvSeverity": self.uv_severity,
                "windSpeed": self.wind_speed,
                "windDirection": self.wind_direction,
                "cloudCover": self.cloud_cover,
                "condition": self.condition,
                "description": self.description,
                "icon": self.icon,
            },
        }


@dataclass(frozen=True)
class ForecastPoint:
    """One forecast step, kept in provider (chronological) order."""

    datetime: str
    temperature: int
    humidity: float
    wind_speed: float
    condition: str
    description: str
    icon: str
    precipitation_probability: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "datetime": self.datetime,
            "temperature": self.temperature,
            "humidity": self.humidity,
            "windSpeed": self.wind_speed,
            "condition": self.condition,
            "description": self.description,
            "icon": self.icon,
            "precipitationProbability": self.precipitation_probability,
        }


@dataclass(frozen=True)
class PollutantComponents:
    """Pollutant concentrations in µg/m³."""

    co: float
    no: float
    no2: float
    o3: float
    so2: float
    pm2_5: float
    pm10: float
    nh3: float

    def surfaced(self) -> list[tuple[str, float]]:
        """Pollutants shown to users, in display order (NO and NH3 are kept but hidden)."""
        return [
            ("CO", self.co),
            ("NO₂", self.no2),
            ("O₃", self.o3),
            ("PM2.5", self.pm2_5),
            ("PM10", self.pm10),
            ("SO₂", self.so2),
        ]

    def to_dict(self) -> dict[str, float]:
        return {
            "co": self.co,
            "no": self.no,
            "no2": self.no2,
            "o3": self.o3,
            "so2": self.so2,
            "pm2_5": self.pm2_5,
            "pm10": self.pm10,
            "nh3": self.nh3,
        }


@dataclass(frozen=True)
class AirQualitySample:
    """Air quality index with its classified level.

    Attributes:
        aqi: Provider index, 1 (good) to 5 (very poor)
        level: Level name from the classifier
        color: Display color (hex) for the level
        description: Health description for the level
        components: Pollutant concentrations
    """

    aqi: int
    level: str
    color: str
    description: str
    components: PollutantComponents

    def to_dict(self) -> dict[str, Any]:
        return {
            "aqi": self.aqi,
            "level": self.level,
            "color": self.color,
            "description": self.description,
            "components": self.components.to_dict(),
        }


@dataclass(frozen=True)
class NewsArticle:
    title: str
    description: str
    url: str
    source: str
    published_at: str
    image_url: str | None
    category: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "source": self.source,
            "publishedAt": self.published_at,
            "urlToImage": self.image_url,
            "category": self.category,
        }


@dataclass(frozen=True)
class NewsDigest:
    """Categorized articles for a query.

    Attributes:
        query: Search query sent to the news provider
        total_results: min(len(articles), provider-reported total)
        articles: Filtered, categorized articles
    """

    query: str
    total_results: int
    articles: tuple[NewsArticle, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "totalResults": self.total_results,
            "articles": [article.to_dict() for article in self.articles],
        }


@dataclass(frozen=True)
class DashboardResult:
    """Aggregate of all sources for one city.

    A slot is None exactly when `errors` holds an entry prefixed with that
    slot's source name.

    Attributes:
        city: City as queried
        timestamp: ISO 8601 UTC time the result was assembled
        weather: Current conditions, or None
        forecast: Up to 8 forecast points, or None
        air_quality: Air quality sample, or None
        news: News digest, or None
        errors: "<source>: <message>" entries in SOURCE_ORDER
    """

    city: str
    timestamp: str
    weather: CurrentConditions | None = None
    forecast: tuple[ForecastPoint, ...] | None = None
    air_quality: AirQualitySample | None = None
    news: NewsDigest | None = None
    errors: tuple[str, ...] = ()

    def slot(self, source: str) -> Any:
        return {
            WEATHER: self.weather,
            FORECAST: self.forecast,
            AIR_QUALITY: self.air_quality,
            NEWS: self.news,
        }[source]

    def failed_sources(self) -> list[str]:
        return [entry.split(":", 1)[0] for entry in self.errors]

    def is_empty(self) -> bool:
        return all(self.slot(source) is None for source in SOURCE_ORDER)

    def to_dict(self) -> dict[str, Any]:
        return {
            "city": self.city,
            "timestamp": self.timestamp,
            "weather": self.weather.to_dict() if self.weather else None,
            "forecast": (
                [point.to_dict() for point in self.forecast]
                if self.forecast is not None
                else None
            ),
            "airQuality": self.air_quality.to_dict() if self.air_quality else None,
            "news": self.news.to_dict() if self.news else None,
            "errors": list(self.errors),
        }
