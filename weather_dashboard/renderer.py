"""Presentation adapters for DashboardResult: terminal, JSON and HTML."""

from __future__ import annotations

from datetime import datetime
import json
from pathlib import Path
import re

from jinja2 import Environment, FileSystemLoader, select_autoescape
from rich.console import Console, Group
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from .core.types import (
    AirQualitySample,
    CurrentConditions,
    DashboardResult,
    ForecastPoint,
    NewsDigest,
)
from .utils.convert import parse_iso, utc_now


SORT_KEYS = ("time", "temperature", "humidity", "wind")

_UV_STYLES = {
    "low": "green",
    "moderate": "yellow",
    "high": "dark_orange",
    "very-high": "red",
    "extreme": "magenta",
}


def time_ago(published_at: str, now: datetime | None = None) -> str:
    """Human-readable age of a timestamp ("Just now", "3 hours ago", ...)."""
    now = now or utc_now()
    seconds = int((now - parse_iso(published_at)).total_seconds())
    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        return f"{seconds // 60} minutes ago"
    if seconds < 86400:
        return f"{seconds // 3600} hours ago"
    return f"{seconds // 86400} days ago"


def sort_forecast(points: tuple[ForecastPoint, ...] | list[ForecastPoint], by: str = "time") -> list[ForecastPoint]:
    """Order forecast points for display.

    "time" keeps provider order; the other keys sort descending.
    """
    if by == "time":
        return list(points)
    keys = {
        "temperature": lambda p: p.temperature,
        "humidity": lambda p: p.humidity,
        "wind": lambda p: p.wind_speed,
    }
    if by not in keys:
        raise ValueError(f"Unsupported sort key: {by}. Supported: {', '.join(SORT_KEYS)}")
    return sorted(points, key=keys[by], reverse=True)


# JSON -------------------------------------------------------------------


def render_json(result: DashboardResult) -> str:
    return json.dumps(result.to_dict(), indent=2, ensure_ascii=False)


def export_filename(result: DashboardResult, suffix: str = "json") -> str:
    """File name for an export, e.g. weather-data-Kigali-2026-10-19.json."""
    date = result.timestamp.split("T", 1)[0]
    return f"weather-data-{_safe_name(result.city)}-{date}.{suffix}"


def _safe_name(city: str) -> str:
    return re.sub(r"[^\w.-]+", "_", city.strip()) or "city"


# Terminal ---------------------------------------------------------------


def render_terminal(result: DashboardResult, console: Console, sort_by: str = "time") -> None:
    """Print the dashboard with Rich, noting unavailable slots and errors."""
    console.print(Panel(Text(result.city, style="bold"), subtitle=result.timestamp))

    if result.weather:
        console.print(_weather_panel(result.weather))
    else:
        console.print("[dim]Weather data unavailable[/dim]")

    if result.air_quality:
        console.print(_air_quality_panel(result.air_quality))
    else:
        console.print("[dim]Air quality data unavailable[/dim]")

    if result.forecast is not None:
        console.print(_forecast_table(sort_forecast(result.forecast, sort_by)))
    else:
        console.print("[dim]Forecast data unavailable[/dim]")

    if result.news:
        console.print(_news_table(result.news))
    else:
        console.print("[dim]News data unavailable[/dim]")

    if result.errors:
        console.print(
            Panel(Text("\n".join(result.errors)), title="Partial data", border_style="yellow")
        )


def render_conditions(conditions: CurrentConditions, console: Console) -> None:
    console.print(_weather_panel(conditions))


def render_forecast(points: tuple[ForecastPoint, ...], console: Console, sort_by: str = "time") -> None:
    console.print(_forecast_table(sort_forecast(points, sort_by)))


def render_air_quality(sample: AirQualitySample, console: Console) -> None:
    console.print(_air_quality_panel(sample))


def render_news(digest: NewsDigest, console: Console) -> None:
    console.print(_news_table(digest))


def _weather_panel(weather: CurrentConditions) -> Panel:
    loc = weather.location
    place = f"{loc.name}, {loc.country}" if loc.country else loc.name
    uv_style = _UV_STYLES.get(weather.uv_severity, "")
    visibility = f"{weather.visibility:g} km" if weather.visibility is not None else "n/a"
    body = Group(
        Text(f"{weather.temperature}°C  {weather.condition} ({weather.description})", style="bold"),
        Text(f"Feels like {weather.feels_like}°C"),
        Text(
            f"Humidity {weather.humidity}%  Wind {weather.wind_speed} m/s  "
            f"Pressure {weather.pressure} hPa  Visibility {visibility}"
        ),
        Text.assemble("UV index ", (f"{weather.uv_index} ({weather.uv_severity})", uv_style)),
    )
    return Panel(body, title=Text(f"Current weather: {place}"))


def _air_quality_panel(sample: AirQualitySample) -> Panel:
    table = Table(show_header=True, box=None)
    for name, _ in sample.components.surfaced():
        table.add_column(name, justify="right")
    table.add_row(*(str(round(value)) for _, value in sample.components.surfaced()))
    header = Text.assemble(
        ("AQI ", "bold"),
        (f"{sample.aqi} {sample.level}", f"bold {sample.color}"),
        f"  {sample.description}",
    )
    return Panel(Group(header, table), title="Air quality (µg/m³)")


def _forecast_table(points: list[ForecastPoint]) -> Table:
    table = Table(title="Forecast")
    table.add_column("Time")
    table.add_column("Temp", justify="right")
    table.add_column("Condition")
    table.add_column("Humidity", justify="right")
    table.add_column("Wind", justify="right")
    table.add_column("Precip.", justify="right")
    for point in points:
        table.add_row(
            parse_iso(point.datetime).strftime("%H:00"),
            f"{point.temperature}°C",
            Text(point.condition),
            f"{point.humidity}%",
            f"{point.wind_speed}m/s",
            f"{point.precipitation_probability:.0f}%",
        )
    return table


def _news_table(digest: NewsDigest) -> Table:
    table = Table(title=f"News ({digest.total_results})")
    table.add_column("Category")
    table.add_column("Title")
    table.add_column("Source")
    table.add_column("Published")
    for article in digest.articles:
        table.add_row(
            Text(article.category),
            Text(article.title, style=Style(link=article.url)),
            Text(article.source),
            time_ago(article.published_at) if article.published_at else "",
        )
    return table


# HTML -------------------------------------------------------------------


def render_dashboard(result: DashboardResult, output_path: Path, sort_by: str = "time") -> None:
    """Render the dashboard as a standalone HTML page on disk."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_html(result, sort_by), encoding="utf-8")


def render_html(result: DashboardResult, sort_by: str = "time") -> str:
    env = Environment(
        loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
        autoescape=select_autoescape(["html"]),
    )
    template = env.get_template("dashboard.html")

    weather = result.weather
    place = None
    if weather is not None:
        loc = weather.location
        place = f"{loc.name}, {loc.country}" if loc.country else loc.name

    forecast = None
    if result.forecast is not None:
        forecast = [
            {"time": parse_iso(point.datetime).strftime("%H:00"), "point": point}
            for point in sort_forecast(result.forecast, sort_by)
        ]

    articles = []
    if result.news is not None:
        for article in result.news.articles:
            articles.append(
                {
                    "article": article,
                    "published": time_ago(article.published_at) if article.published_at else "",
                }
            )

    return template.render(
        result=result,
        weather=weather,
        place=place,
        air_quality=result.air_quality,
        pollutants=result.air_quality.components.surfaced() if result.air_quality else [],
        forecast=forecast,
        news=result.news,
        articles=articles,
    )
