"""
OpenWeatherMap integrations: geocoding, current weather, UV, forecast and
air pollution.

All classes share one httpx.AsyncClient and one API key. Payloads are
returned as the provider sends them; the engine normalises them.
"""

from __future__ import annotations

import httpx

from ..core.errors import NotFoundError, UpstreamMalformedError
from ..core.types import Coordinates
from ..utils.convert import round_half_up
from .base import (
    AirQualityFetcher,
    ConditionsFetcher,
    ForecastFetcher,
    LocationResolver,
    Payload,
)
from .http import get_json


_AUTH_MESSAGES = {401: "Invalid API key for weather service"}


class _OpenWeatherClient:
    def __init__(self, client: httpx.AsyncClient, api_key: str, base_url: str) -> None:
        self.client = client
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    async def _get(self, path: str, params: dict, timeout: float):
        return await get_json(
            self.client,
            f"{self.base_url}/{path}",
            {**params, "appid": self.api_key},
            timeout,
            status_messages=_AUTH_MESSAGES,
        )

    @staticmethod
    def _coords_params(coords: Coordinates) -> dict:
        return {"lat": coords.lat, "lon": coords.lon}


class OpenWeatherResolver(_OpenWeatherClient, LocationResolver):
    """Direct geocoding, first match only."""

    async def resolve(self, name: str, timeout: float) -> Coordinates:
        data = await self._get("direct", {"q": name, "limit": 1}, timeout)
        if not data:
            raise NotFoundError(f'City "{name}" not found')
        try:
            first = data[0]
            return Coordinates(
                lat=float(first["lat"]),
                lon=float(first["lon"]),
                name=str(first["name"]),
                country=str(first.get("country", "")),
            )
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise UpstreamMalformedError(f"Unexpected geocoding payload: {exc}") from exc


class OpenWeatherConditions(_OpenWeatherClient, ConditionsFetcher):
    async def fetch(self, coords: Coordinates, timeout: float) -> Payload:
        return await self._get(
            "weather", {**self._coords_params(coords), "units": "metric"}, timeout
        )

    async def fetch_uv_index(self, coords: Coordinates, timeout: float) -> int:
        data = await self._get("uvi", self._coords_params(coords), timeout)
        try:
            return round_half_up(data["value"])
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamMalformedError(f"Unexpected UV payload: {exc}") from exc


class OpenWeatherForecast(_OpenWeatherClient, ForecastFetcher):
    async def fetch(self, coords: Coordinates, timeout: float) -> Payload:
        return await self._get(
            "forecast", {**self._coords_params(coords), "units": "metric"}, timeout
        )


class OpenWeatherAirQuality(_OpenWeatherClient, AirQualityFetcher):
    async def fetch(self, coords: Coordinates, timeout: float) -> Payload:
        return await self._get("air_pollution", self._coords_params(coords), timeout)
