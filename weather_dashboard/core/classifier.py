"""
Rule-based classification of raw provider values.

Three pure functions:
1. classify_aqi: air quality index (1-5) to level, color and description
2. classify_uv: UV index to a severity bucket
3. categorize_article: article text to a news category by keyword match
"""

from __future__ import annotations

from dataclasses import dataclass


class ClassificationError(Exception):
    """Raised when a classifier receives a value outside its domain.

    This signals a broken upstream contract and is not converted into a
    source failure by the engine.
    """


@dataclass(frozen=True)
class AqiLevel:
    level: str
    color: str
    description: str


AQI_LEVELS: dict[int, AqiLevel] = {
    1: AqiLevel("Good", "#00e400", "Air quality is considered satisfactory"),
    2: AqiLevel("Fair", "#ffff00", "Air quality is acceptable for most people"),
    3: AqiLevel("Moderate", "#ff7e00", "Members of sensitive groups may experience health effects"),
    4: AqiLevel("Poor", "#ff0000", "Everyone may begin to experience health effects"),
    5: AqiLevel("Very Poor", "#8f3f97", "Health warnings of emergency conditions"),
}

# (upper bound inclusive, bucket); anything above the last bound is extreme.
UV_BUCKETS: tuple[tuple[int, str], ...] = (
    (2, "low"),
    (5, "moderate"),
    (7, "high"),
    (10, "very-high"),
)
UV_EXTREME = "extreme"

GENERAL_CATEGORY = "general"

# Checked in this order; the first category with a matching keyword wins.
NEWS_CATEGORIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("severe", ("hurricane", "tornado", "flood", "blizzard", "storm", "disaster", "emergency")),
    ("climate", ("climate change", "global warming", "greenhouse", "carbon", "emissions")),
    ("forecast", ("forecast", "prediction", "outlook", "expect", "coming")),
    ("agriculture", ("crop", "farm", "agriculture", "harvest", "drought")),
)


def classify_aqi(aqi: int) -> AqiLevel:
    """Return the level for an air quality index.

    Args:
        aqi: Index reported by the provider, expected in 1..5

    Returns:
        AqiLevel with level name, display color and description

    Raises:
        ClassificationError: If aqi is not an integer in 1..5
    """
    if isinstance(aqi, bool) or not isinstance(aqi, int) or aqi not in AQI_LEVELS:
        raise ClassificationError(f"AQI value out of range 1-5: {aqi!r}")
    return AQI_LEVELS[aqi]


def classify_uv(uv_index: int) -> str:
    """Return the severity bucket for a UV index (upper bounds inclusive)."""
    if isinstance(uv_index, bool) or not isinstance(uv_index, (int, float)) or uv_index < 0:
        raise ClassificationError(f"UV index must be a non-negative number: {uv_index!r}")
    for upper, bucket in UV_BUCKETS:
        if uv_index <= upper:
            return bucket
    return UV_EXTREME


def categorize_article(content: str) -> str:
    """Assign a news category to article text.

    The text is lower-cased and tested against NEWS_CATEGORIES in order;
    "general" is returned when nothing matches.
    """
    lowered = (content or "").lower()
    for category, keywords in NEWS_CATEGORIES:
        if any(keyword in lowered for keyword in keywords):
            return category
    return GENERAL_CATEGORY


__all__ = [
    "AQI_LEVELS",
    "AqiLevel",
    "ClassificationError",
    "GENERAL_CATEGORY",
    "NEWS_CATEGORIES",
    "UV_BUCKETS",
    "categorize_article",
    "classify_aqi",
    "classify_uv",
]
