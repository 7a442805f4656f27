"""
Timestamp parsing utilities shared by the RSS parser and post-processors.

Upstream date fields arrive in many shapes: RFC 822 (RSS pubDate), ISO 8601
with or without a Z suffix, compact YYYYMMDD, and Unix epochs in seconds or
milliseconds. All parsers here return None instead of raising.
"""

import re
from datetime import date, datetime, time, timezone, tzinfo
from email.utils import parsedate_to_datetime
from typing import Any

_DATE_ONLY_RE = re.compile(r"^(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})$")
_COMPACT_DATE_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})$")
_EPOCH_RE = re.compile(r"^\d{10,13}$")

# Epoch values above this are treated as milliseconds
_EPOCH_MS_THRESHOLD = 100_000_000_000


def _ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _parse_epoch(value: float) -> datetime | None:
    if value > _EPOCH_MS_THRESHOLD:
        value = value / 1000
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _parse_date_only(text: str) -> date | None:
    match = _DATE_ONLY_RE.match(text) or _COMPACT_DATE_RE.match(text)
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_datetime(value: Any) -> datetime | None:
    """
    Parse an upstream date value into an aware datetime.

    Args:
        value: str, datetime, date, or epoch number

    Returns:
        Timezone-aware datetime, or None if the value is absent or unparseable
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _ensure_aware(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        return _parse_epoch(float(value))
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    day = _parse_date_only(text)
    if day is not None:
        return datetime.combine(day, time.min, tzinfo=timezone.utc)

    if _EPOCH_RE.match(text):
        return _parse_epoch(float(text))

    try:
        return _ensure_aware(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass

    try:
        return _ensure_aware(parsedate_to_datetime(text))
    except (TypeError, ValueError, IndexError):
        return None


def parse_calendar_date(value: Any, tz: tzinfo | None = None) -> date | None:
    """
    Resolve an upstream value to a calendar date.

    Date-only values (``2024-06-10``, ``20240610``, ``date`` objects) keep
    their calendar date as-is. Timestamps are converted to ``tz`` first, so a
    timestamp late in the UTC day lands on the right local date.
    """
    if isinstance(value, datetime):
        pass
    elif isinstance(value, date):
        return value
    elif isinstance(value, str):
        day = _parse_date_only(value.strip())
        if day is not None:
            return day

    parsed = parse_datetime(value)
    if parsed is None:
        return None
    if tz is not None:
        parsed = parsed.astimezone(tz)
    return parsed.date()
