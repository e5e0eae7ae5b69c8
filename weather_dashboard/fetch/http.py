"""
Single-attempt JSON GET over httpx.

Every upstream call in the package goes through get_json(), which turns
transport errors, HTTP error statuses and undecodable bodies into
SourceError subclasses. There is no retry: one attempt per call.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from ..core.errors import (
    SourceError,
    SourceTimeoutError,
    UpstreamMalformedError,
    error_for_status,
)
from ..utils.logging import get_logger


logger = get_logger("fetch")


def build_client(user_agent: str, trust_env: bool = True) -> httpx.AsyncClient:
    """Create the AsyncClient shared by all fetchers of one run."""
    return httpx.AsyncClient(
        headers={"User-Agent": user_agent, "Accept": "application/json"},
        follow_redirects=True,
        trust_env=trust_env,
    )


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    params: dict[str, Any],
    timeout: float,
    status_messages: dict[int, str] | None = None,
) -> Any:
    """GET a URL and decode its JSON body.

    Args:
        client: Shared async client
        url: Endpoint URL
        params: Query parameters (credentials included)
        timeout: Request timeout in seconds
        status_messages: Optional overrides for the error message of specific
                         HTTP statuses (e.g. {401: "Invalid API key"})

    Returns:
        Decoded JSON body

    Raises:
        SourceTimeoutError: If the request timed out
        SourceError: For transport failures and HTTP error statuses
        UpstreamMalformedError: If the body is not valid JSON
    """
    try:
        resp = await client.get(url, params=params, timeout=timeout)
    except httpx.TimeoutException as exc:
        logger.warning("Request to %s timed out after %ss", _redact(url), timeout)
        raise SourceTimeoutError(f"Request timed out after {timeout:g}s") from exc
    except httpx.HTTPError as exc:
        logger.warning("Request to %s failed: %s", _redact(url), exc)
        raise SourceError(f"{type(exc).__name__}: {exc}") from exc

    if resp.status_code >= 400:
        message = (status_messages or {}).get(resp.status_code)
        if message is None:
            message = f"HTTP {resp.status_code}: {_short_reason(resp)}"
        logger.warning("Provider returned %s for %s", resp.status_code, _redact(url))
        raise error_for_status(resp.status_code, message)

    try:
        return resp.json()
    except json.JSONDecodeError as exc:
        raise UpstreamMalformedError(f"Invalid JSON from provider: {exc}") from exc


def _short_reason(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except json.JSONDecodeError:
        return resp.reason_phrase or resp.text[:200]
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return resp.reason_phrase or "request failed"


def _redact(url: str) -> str:
    return url.split("?", 1)[0]
