import asyncio
import copy
from datetime import datetime, timedelta, timezone
import json
from pathlib import Path

import pytest
from rich.console import Console

from weather_dashboard.core.errors import SourceError
from weather_dashboard.engine import Timeouts
from weather_dashboard.renderer import (
    export_filename,
    render_dashboard,
    render_json,
    render_news,
    render_terminal,
    sort_forecast,
    time_ago,
)


NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def partial_result(make_engine, sources):
    sources.air_quality.delay = 0.5
    return asyncio.run(make_engine(Timeouts(air_quality=0.05)).aggregate("Kigali"))


@pytest.mark.parametrize(
    "delta, expected",
    [
        (timedelta(seconds=30), "Just now"),
        (timedelta(minutes=5), "5 minutes ago"),
        (timedelta(hours=3, minutes=10), "3 hours ago"),
        (timedelta(days=2, hours=1), "2 days ago"),
    ],
)
def test_time_ago(delta, expected):
    published = (NOW - delta).isoformat().replace("+00:00", "Z")
    assert time_ago(published, now=NOW) == expected


def test_sort_forecast(partial_result):
    points = partial_result.forecast
    assert sort_forecast(points, "time") == list(points)
    by_temp = sort_forecast(points, "temperature")
    assert [p.temperature for p in by_temp] == sorted((p.temperature for p in points), reverse=True)
    by_humidity = sort_forecast(points, "humidity")
    assert by_humidity[0].humidity == max(p.humidity for p in points)
    with pytest.raises(ValueError, match="Unsupported sort key"):
        sort_forecast(points, "pressure")


def test_render_json_shape(partial_result):
    data = json.loads(render_json(partial_result))

    assert list(data.keys()) == ["city", "timestamp", "weather", "forecast", "airQuality", "news", "errors"]
    assert data["airQuality"] is None
    assert data["errors"] == ["airQuality: Request timed out after 0.05s"]
    assert data["weather"]["current"]["uvSeverity"] == "high"
    assert data["news"]["totalResults"] == 4


def test_export_filename(partial_result):
    assert export_filename(partial_result) == "weather-data-Kigali-2026-10-19.json"
    assert export_filename(partial_result, "html").endswith(".html")


def test_render_terminal_marks_unavailable_slots(partial_result):
    console = Console(record=True, width=140)

    render_terminal(partial_result, console)
    text = console.export_text()

    assert "Air quality data unavailable" in text
    assert "airQuality: Request timed out after 0.05s" in text
    assert "Current weather: Kigali, RW" in text
    assert "Hurricane season outlook" in text


def test_render_dashboard_escapes_html(make_engine, sources, tmp_path: Path):
    news = copy.deepcopy(sources.news.payload)
    news["payload"]["articles"][0]["title"] = "Storm <script>alert(1)</script>"
    sources.news.payload = news
    sources.forecast.error = SourceError("HTTP 500: boom")
    result = asyncio.run(make_engine().aggregate("Kigali"))
    output_path = tmp_path / "export" / "dashboard.html"

    render_dashboard(result, output_path)
    html = output_path.read_text(encoding="utf-8")

    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "<script>" not in html
    assert "Forecast data unavailable" in html
    assert "forecast: HTTP 500: boom" in html
    assert 'style="color: #ff7e00"' in html
    assert 'class="uv-high"' in html


def test_render_news_keeps_markup_in_upstream_text_literal(make_engine, sources):
    news = copy.deepcopy(sources.news.payload)
    news["payload"]["articles"][0]["url"] = "https://example.com/a]b[/x]"
    news["payload"]["articles"][0]["title"] = "Storm [bold]warning[/bold]"
    sources.news.payload = news
    result = asyncio.run(make_engine().aggregate("Kigali"))
    console = Console(record=True, width=140)

    render_news(result.news, console)
    text = console.export_text()

    assert "Storm [bold]warning[/bold]" in text
