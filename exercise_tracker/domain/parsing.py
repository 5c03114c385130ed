"""Tolerant parsing of the loosely typed values accepted by the HTTP surface.

Request values arrive as form strings or arbitrary JSON scalars. Dates and
limits are parsed leniently (a bad value is treated as absent), durations
strictly (a bad value is an error).
"""

from __future__ import annotations

from datetime import date, datetime, timezone
import math
import re
from typing import Any

DISPLAY_DATE_FORMAT = "%a %b %d %Y"

_FALLBACK_DATE_FORMATS = (
    DISPLAY_DATE_FORMAT,
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_calendar_date(value: Any) -> date | None:
    """Return the calendar date described by ``value`` or ``None`` if it does not parse.

    ISO 8601 dates and timestamps are accepted first (a timestamp with an
    offset contributes its UTC date, a naive one its own date part), then a
    handful of common written formats, including unpadded ``2024-1-5`` and
    the one used in responses so that echoed dates can be sent back verbatim.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc)
        return moment.date()
    except ValueError:
        pass

    for fmt in _FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_calendar_date(value: date) -> str:
    """Render a date as ``Www Mmm DD YYYY`` (e.g. ``Mon Jan 01 2024``)."""
    return value.strftime(DISPLAY_DATE_FORMAT)


def parse_limit(value: Any) -> int | None:
    """Parse the leading integer of ``value``; return it only when positive.

    ``"3"``, ``"3 rows"`` and ``"3.9"`` all yield 3. Anything without a
    leading integer, or a result below 1, yields ``None`` (no limit).
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if not isinstance(value, str):
        return None
    match = _LEADING_INT.match(value)
    if match is None:
        return None
    limit = int(match.group(1))
    return limit if limit > 0 else None


def is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def coerce_duration(value: Any) -> float:
    """Convert a duration in minutes to a finite number.

    Raises
    ------
    ValueError
        When ``value`` is not a number or a numeric string.
    """
    if isinstance(value, bool):
        raise ValueError("duration must be a number")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and "_" not in value:
        try:
            number = float(value.strip())
        except ValueError as exc:
            raise ValueError("duration must be a number") from exc
    else:
        raise ValueError("duration must be a number")

    if not math.isfinite(number):
        raise ValueError("duration must be a number")
    return number


def present_duration(value: float) -> int | float:
    """Return integral durations as ``int`` so they serialise as ``30`` rather than ``30.0``."""
    return int(value) if float(value).is_integer() else value
