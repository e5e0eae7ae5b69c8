"""Small conversions shared by normalisation and rendering."""

from __future__ import annotations

from datetime import datetime, timezone
import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounded up.

    Provider values such as 12.5 °C must display as 13, which the built-in
    round() (banker's rounding) does not guarantee.
    """
    return math.floor(float(value) + 0.5)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_utc(moment: datetime) -> str:
    """Format as ISO 8601 UTC with millisecond precision and a trailing Z."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def from_epoch(seconds: float) -> str:
    try:
        moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError) as exc:
        raise ValueError(f"Epoch seconds out of range: {seconds!r}") from exc
    return iso_utc(moment)


def parse_iso(value: str) -> datetime:
    """Parse an ISO 8601 timestamp, accepting a trailing Z."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
