"""
Command-line interface for the Weather Dashboard.

Uses Typer to expose the full dashboard and each single source. Loads
.env files for API key configuration (OPENWEATHER_API_KEY, NEWS_API_KEY).
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
import typer
from rich.console import Console

from .config import AppConfig, load_config
from .core.errors import ConfigError, SourceError, exit_code_for
from .renderer import (
    SORT_KEYS,
    export_filename,
    render_air_quality,
    render_conditions,
    render_dashboard,
    render_forecast,
    render_json,
    render_news,
    render_terminal,
)
from .runner import run_dashboard, run_single
from .utils.logging import setup_logging

app = typer.Typer(add_completion=False, help="Weather, forecast, air quality and news for a city.")
console = Console()

FORMATS = ("terminal", "json", "html")

ConfigOption = typer.Option(None, "--config", "-c", exists=True, readable=True, help="YAML config file.")
LogLevelOption = typer.Option(None, "--log-level", help="Logging level.")


def _prepare(config: Path | None, log_level: str | None) -> AppConfig:
    load_dotenv()
    cfg = load_config(str(config) if config else None)
    if log_level:
        cfg.logging.level = log_level
    setup_logging(cfg.logging, Path(cfg.output.export_dir))
    return cfg


def _fail(exc: Exception) -> None:
    if isinstance(exc, SourceError):
        console.print(f"[red]{exc.kind.value}:[/red] {exc.message}")
        raise typer.Exit(code=exit_code_for(exc.kind))
    console.print(f"[red]Error:[/red] {exc}")
    raise typer.Exit(code=1)


@app.command()
def dashboard(
    city: str = typer.Argument(..., help="City name, e.g. Kigali."),
    fmt: str | None = typer.Option(None, "--format", "-f", help="terminal, json or html."),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Export file or directory (json/html)."
    ),
    sort_by: str | None = typer.Option(
        None, "--sort", help="Forecast order: time, temperature, humidity or wind."
    ),
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
):
    """Aggregate all sources for a city.

    Partial data is shown with a warning; the exit code is non-zero only
    when every source failed.
    """
    cfg = _prepare(config, log_level)
    fmt = fmt or cfg.output.format
    sort_by = sort_by or cfg.output.sort_by
    if fmt not in FORMATS:
        raise typer.BadParameter(f"Unsupported format: {fmt}. Supported: {', '.join(FORMATS)}")
    if sort_by not in SORT_KEYS:
        raise typer.BadParameter(f"Unsupported sort key: {sort_by}. Supported: {', '.join(SORT_KEYS)}")

    try:
        result = run_dashboard(city, cfg)
    except ConfigError as exc:
        _fail(exc)

    if fmt == "terminal":
        render_terminal(result, console, sort_by=sort_by)
    elif fmt == "json" and output is None:
        console.print_json(render_json(result))
    else:
        suffix = "json" if fmt == "json" else "html"
        target = _export_path(output or Path(cfg.output.export_dir), export_filename(result, suffix))
        if fmt == "json":
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(render_json(result), encoding="utf-8")
        else:
            render_dashboard(result, target, sort_by=sort_by)
        console.print(f"Dashboard exported: {target}")

    if result.is_empty():
        raise typer.Exit(code=1)


def _export_path(output: Path, filename: str) -> Path:
    if output.suffix:
        return output
    return output / filename


@app.command()
def weather(
    city: str = typer.Argument(...),
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
):
    """Current conditions with UV index."""
    cfg = _prepare(config, log_level)
    try:
        render_conditions(run_single("weather", city, cfg), console)
    except (ConfigError, SourceError) as exc:
        _fail(exc)


@app.command()
def forecast(
    city: str = typer.Argument(...),
    sort_by: str = typer.Option("time", "--sort", help="time, temperature, humidity or wind."),
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
):
    """Forecast for the next 24 hours (3-hour steps)."""
    cfg = _prepare(config, log_level)
    try:
        render_forecast(run_single("forecast", city, cfg), console, sort_by=sort_by)
    except (ConfigError, SourceError) as exc:
        _fail(exc)


@app.command("air-quality")
def air_quality(
    city: str = typer.Argument(...),
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
):
    """Air quality index and pollutant concentrations."""
    cfg = _prepare(config, log_level)
    try:
        render_air_quality(run_single("air-quality", city, cfg), console)
    except (ConfigError, SourceError) as exc:
        _fail(exc)


@app.command()
def news(
    query: str | None = typer.Argument(None, help="City or topic; defaults to general weather news."),
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
):
    """Categorized weather news."""
    cfg = _prepare(config, log_level)
    try:
        render_news(run_single("news", query, cfg), console)
    except (ConfigError, SourceError) as exc:
        _fail(exc)


if __name__ == "__main__":
    app()
