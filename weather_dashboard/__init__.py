"""
Weather Dashboard - concurrent weather, air quality and news aggregation.

This package resolves a city, fetches current conditions, forecast, air
quality and topical news concurrently, and merges them into one
DashboardResult that tolerates the failure of any single source.

Main entry point is the CLI via `weather-dashboard dashboard <city>`.

Example:
    $ weather-dashboard dashboard Kigali --format json
"""

__all__ = ["__version__", "DashboardEngine", "DashboardResult", "Timeouts", "run_dashboard"]
__version__ = "0.1.0"

from .core.types import DashboardResult
from .engine import DashboardEngine, Timeouts
from .runner import run_dashboard
