"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- ProviderConfig: Upstream endpoints and credentials
- TimeoutConfig: Per-source request timeouts
- NewsConfig: News query and filtering settings
- ForecastConfig: Forecast slicing settings
- OutputConfig: Output format settings
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any

import yaml

from .core.errors import ConfigError


@dataclass
class ProviderConfig:
    """Configuration for the upstream weather and news providers.

    Attributes:
        weather_base_url: OpenWeatherMap data API base URL
        geocoding_base_url: OpenWeatherMap geocoding API base URL
        news_base_url: NewsAPI base URL
        weather_api_key: Optional inline OpenWeatherMap key (overrides env var)
        weather_api_key_env: Environment variable holding the OpenWeatherMap key
        news_api_key: Optional inline NewsAPI key (overrides env var)
        news_api_key_env: Environment variable holding the NewsAPI key
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
    """

    weather_base_url: str = "https://api.openweathermap.org/data/2.5"
    geocoding_base_url: str = "https://api.openweathermap.org/geo/1.0"
    news_base_url: str = "https://newsapi.org/v2"
    weather_api_key: str | None = None
    weather_api_key_env: str = "OPENWEATHER_API_KEY"
    news_api_key: str | None = None
    news_api_key_env: str = "NEWS_API_KEY"
    trust_env: bool = True
    user_agent: str = "weather-dashboard/0.1"


@dataclass
class TimeoutConfig:
    """Per-call timeouts in seconds.

    Attributes:
        geocoding_seconds: Location lookup
        weather_seconds: Current conditions
        forecast_seconds: Forecast
        air_quality_seconds: Air pollution
        news_seconds: News search
        uv_seconds: UV index enrichment inside current conditions
    """

    geocoding_seconds: float = 10.0
    weather_seconds: float = 10.0
    forecast_seconds: float = 10.0
    air_quality_seconds: float = 10.0
    news_seconds: float = 10.0
    uv_seconds: float = 5.0


@dataclass
class NewsConfig:
    """Configuration for the news source.

    Attributes:
        page_size: Number of articles requested from the provider
        max_articles: Number of articles kept after filtering
        language: Article language filter
        default_query: Query used when none is given
    """

    page_size: int = 10
    max_articles: int = 6
    language: str = "en"
    default_query: str = "weather"


@dataclass
class ForecastConfig:
    max_points: int = 8


@dataclass
class OutputConfig:
    """Configuration for output generation.

    Attributes:
        format: "terminal", "json" or "html"
        sort_by: Forecast ordering for display ("time", "temperature", "humidity", "wind")
        export_dir: Directory for json/html exports
    """

    format: str = "terminal"
    sort_by: str = "time"
    export_dir: str = "out"


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the log file
    """

    level: str = "WARNING"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "dashboard.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    news: NewsConfig = field(default_factory=NewsConfig)
    forecast: ForecastConfig = field(default_factory=ForecastConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_SECTIONS: dict[str, type] = {
    "provider": ProviderConfig,
    "timeouts": TimeoutConfig,
    "news": NewsConfig,
    "forecast": ForecastConfig,
    "output": OutputConfig,
    "logging": LoggingConfig,
}


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig.

    Unknown sections and unknown keys inside a section are ignored.
    """
    data = asdict(base)
    for key, value in raw.items():
        if key not in data or not isinstance(value, dict):
            continue
        known = data[key]
        known.update({k: v for k, v in value.items() if k in known})
    return AppConfig(**{name: cls(**data[name]) for name, cls in _SECTIONS.items()})


def get_weather_api_key(cfg: ProviderConfig) -> str:
    """Get the OpenWeatherMap key from inline config or environment variable."""
    return _require_key(cfg.weather_api_key, cfg.weather_api_key_env)


def get_news_api_key(cfg: ProviderConfig) -> str:
    """Get the NewsAPI key from inline config or environment variable."""
    return _require_key(cfg.news_api_key, cfg.news_api_key_env)


def _require_key(inline: str | None, env_name: str) -> str:
    key = inline or os.getenv(env_name)
    if not key:
        raise ConfigError(f"{env_name} environment variable is required")
    return key
