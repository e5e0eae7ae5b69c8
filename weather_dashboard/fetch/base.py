"""
Abstract base classes for location resolution and source fetching.

The aggregation engine receives one LocationResolver and four fetchers.
Fetchers return provider-native payloads (plain dicts); normalisation and
classification happen in the engine. Every failure is raised as a
SourceError subclass.

To add a new provider:
1. Inherit from the matching base class
2. Implement the abstract methods
3. Register it in factory.build_sources()
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..core.types import Coordinates


Payload = dict[str, Any]


class LocationResolver(ABC):
    """Resolves a free-text place name to coordinates."""

    @abstractmethod
    async def resolve(self, name: str, timeout: float) -> Coordinates:
        """Look up a place.

        Args:
            name: Free-text place name
            timeout: Request timeout in seconds

        Returns:
            Coordinates of the best match

        Raises:
            NotFoundError: If no place matches
            UnauthorizedError: If the provider rejects the credentials
        """
        raise NotImplementedError


class ConditionsFetcher(ABC):
    """Current conditions plus the UV index used to enrich them."""

    @abstractmethod
    async def fetch(self, coords: Coordinates, timeout: float) -> Payload:
        raise NotImplementedError

    @abstractmethod
    async def fetch_uv_index(self, coords: Coordinates, timeout: float) -> int:
        """Return the current UV index, rounded to an integer."""
        raise NotImplementedError


class ForecastFetcher(ABC):
    @abstractmethod
    async def fetch(self, coords: Coordinates, timeout: float) -> Payload:
        raise NotImplementedError


class AirQualityFetcher(ABC):
    @abstractmethod
    async def fetch(self, coords: Coordinates, timeout: float) -> Payload:
        raise NotImplementedError


class NewsFetcher(ABC):
    """Topical news search by free-text query."""

    @abstractmethod
    async def fetch(self, query: str, timeout: float) -> Payload:
        """Search for articles.

        Returns:
            {"query": <query sent upstream>, "payload": <provider response>}
        """
        raise NotImplementedError
