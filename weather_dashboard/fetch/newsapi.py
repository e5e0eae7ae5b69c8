"""NewsAPI "everything" search for weather-related articles."""

from __future__ import annotations

import httpx

from .base import NewsFetcher, Payload
from .http import get_json


WEATHER_TERMS = (
    "weather",
    "climate",
    "storm",
    "hurricane",
    "tornado",
    "flood",
    "drought",
    "heatwave",
    "blizzard",
    "rainfall",
    "temperature",
)

_STATUS_MESSAGES = {
    401: "Invalid API key for news service",
    429: "News API rate limit exceeded",
}


def build_search_query(city: str | None) -> str:
    """Build the provider query for a city.

    A real city is combined with every weather term; the generic "weather"
    query (or no city) uses the first five terms only.
    """
    if city and city != "weather":
        return f'("{city}" AND ({" OR ".join(WEATHER_TERMS)}))'
    return " OR ".join(WEATHER_TERMS[:5])


class NewsApiFetcher(NewsFetcher):
    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        base_url: str = "https://newsapi.org/v2",
        page_size: int = 10,
        language: str = "en",
    ) -> None:
        self.client = client
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self.language = language

    async def fetch(self, query: str, timeout: float) -> Payload:
        search_query = build_search_query(query)
        payload = await get_json(
            self.client,
            f"{self.base_url}/everything",
            {
                "q": search_query,
                "sortBy": "publishedAt",
                "language": self.language,
                "pageSize": self.page_size,
                "apiKey": self.api_key,
            },
            timeout,
            status_messages=_STATUS_MESSAGES,
        )
        return {"query": search_query, "payload": payload}
