"""Parsers for free-text relative ages and abbreviated magnitudes.

Both parsers are total: any string (including ``None`` or garbage) maps to a
documented default instead of raising.

Age defaults:
    empty / missing text       → 1440 minutes (one day)
    unrecognised text          → 720 minutes (half a day)
    text mentioning yesterday  → 1440 minutes
"""

import math
import re
from typing import Optional

EMPTY_AGE_MINUTES = 60 * 24
YESTERDAY_AGE_MINUTES = 60 * 24
UNKNOWN_AGE_MINUTES = 60 * 12

_MINUTES_PER_UNIT = {
    "minute": 1,
    "hour": 60,
    "day": 60 * 24,
}

_AGE_RE = re.compile(r"(\d+)\s*(minute|min|hour|hr|day|d|h|m)")
_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")


def _classify_unit(cleaned: str, matched_unit: str) -> str:
    """Return the unit class for an age string.

    Classification looks at the whole lower-cased text in priority order
    minute > hour > day, so ``"5 min ago"`` is minutes even though ``"m"``
    alone would also match. Bare single-letter units that the containment
    checks cannot see (``"30m ago"``) fall back to the matched token.
    """
    if "min" in cleaned:
        return "minute"
    if "hour" in cleaned or "hr" in cleaned or "h" in cleaned:
        return "hour"
    if "day" in cleaned or "d" in cleaned:
        return "day"
    return {"m": "minute", "h": "hour", "d": "day"}.get(matched_unit[0], "minute")


def normalize_age(text: Optional[str]) -> int:
    """Convert a relative-time string into minutes ago.

    Examples:
        ``"5 min ago"`` → ``5``
        ``"3 hours ago"`` → ``180``
        ``"2 days ago"`` → ``2880``
        ``"yesterday"`` → ``1440``

    Args:
        text (str): Free-text age as produced upstream (e.g. ``"2 hours ago"``).

    Returns:
        int: Non-negative age in minutes.
    """
    if not text:
        return EMPTY_AGE_MINUTES

    cleaned = str(text).lower()
    match = _AGE_RE.search(cleaned)
    if match:
        amount = int(match.group(1))
        unit = _classify_unit(cleaned, match.group(2))
        return amount * _MINUTES_PER_UNIT[unit]

    if "yesterday" in cleaned:
        return YESTERDAY_AGE_MINUTES
    return UNKNOWN_AGE_MINUTES


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_age(minutes: int) -> str:
    """Render an age in minutes as a short display label (``"3h ago"``)."""
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    hours = _round_half_up(minutes / 60)
    if hours < 24:
        return f"{hours}h ago"
    days = _round_half_up(hours / 24)
    return f"{days}d ago"


def parse_magnitude(text: Optional[str]) -> float:
    """Convert an abbreviated count such as ``"45.2K"`` or ``"1.2M"`` to a number.

    Shared by news engagement and trend mention counts.

    Args:
        text (str): Free-text magnitude; thousands separators are ignored.

    Returns:
        float: Parsed value, ``0.0`` when no number is present.
    """
    if not text:
        return 0.0

    raw = str(text)
    match = _NUMBER_RE.search(raw.replace(",", ""))
    if not match:
        return 0.0

    value = float(match.group(0))
    lowered = raw.lower()
    if "k" in lowered:
        return value * 1_000
    if "m" in lowered:
        return value * 1_000_000
    return value
