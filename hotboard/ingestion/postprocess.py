"""
Source-specific post-processing rules.

Applied after normalization:
- Date-window filter for calendar sources (e.g. IPO subscriptions this week)
- Relative-date classification used for display-tier labels
- Free-text truncation with an ellipsis marker
"""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, NamedTuple

from hotboard.ingestion.dates import parse_calendar_date
from hotboard.ingestion.schemas import CanonicalItem

DEFAULT_WINDOW_DAYS = 7
DEFAULT_TRUNCATE_LENGTH = 40
ELLIPSIS = "..."

# Offsets beyond "tomorrow" up to this many days count as upcoming
_UPCOMING_MAX_DAYS = 3


class DateBucket(str, Enum):
    """Display tier of a date relative to now."""

    TODAY = "today"
    TOMORROW = "tomorrow"
    YESTERDAY = "yesterday"
    UPCOMING = "upcoming"
    FUTURE = "future"
    PAST = "past"
    UNKNOWN = "unknown"


class RelativeDate(NamedTuple):
    """Classification result: bucket plus signed day offset (None if unknown)."""

    bucket: DateBucket
    days: int | None


def _today(now: datetime | date) -> date:
    if isinstance(now, datetime):
        return now.date()
    return now


def _tz(now: datetime | date):
    return now.tzinfo if isinstance(now, datetime) else None


def item_field(item: CanonicalItem, name: str) -> Any:
    """Look up a field on a canonical item, including source-specific extras."""
    if name in ("pubDate", "pub_date"):
        return item.pub_date
    if name in ("title", "link", "description"):
        return getattr(item, name)
    return item.extra.get(name)


def classify_relative_date(target: Any, now: datetime | date) -> RelativeDate:
    """
    Bucket a target date relative to now.

    Comparison is by calendar date in now's timezone, so the result does not
    depend on the time of day or on the process locale.

    Args:
        target: Date value in any format accepted by parse_calendar_date
        now: Reference time

    Returns:
        RelativeDate with bucket and day offset (target - today)
    """
    target_day = parse_calendar_date(target, _tz(now))
    if target_day is None:
        return RelativeDate(DateBucket.UNKNOWN, None)

    days = (target_day - _today(now)).days
    if days == 0:
        bucket = DateBucket.TODAY
    elif days == 1:
        bucket = DateBucket.TOMORROW
    elif days == -1:
        bucket = DateBucket.YESTERDAY
    elif 1 < days <= _UPCOMING_MAX_DAYS:
        bucket = DateBucket.UPCOMING
    elif days > _UPCOMING_MAX_DAYS:
        bucket = DateBucket.FUTURE
    else:
        bucket = DateBucket.PAST
    return RelativeDate(bucket, days)


def filter_date_window(
    items: list[CanonicalItem],
    date_field: str,
    now: datetime | date,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> list[CanonicalItem]:
    """
    Keep items whose date field lies within [now - window, now + window].

    Items without a parseable date are dropped. Survivors are sorted
    descending by date (latest date first); ties keep input order.
    """
    today = _today(now)
    start = today - timedelta(days=window_days)
    end = today + timedelta(days=window_days)
    tz = _tz(now)

    dated: list[tuple[date, CanonicalItem]] = []
    for item in items:
        day = parse_calendar_date(item_field(item, date_field), tz)
        if day is None:
            continue
        if start <= day <= end:
            dated.append((day, item))

    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [item for _, item in dated]


def truncate_text(
    text: str,
    limit: int = DEFAULT_TRUNCATE_LENGTH,
    marker: str = ELLIPSIS,
) -> str:
    """
    Truncate text to `limit` characters, appending marker only when cut.

    Examples:
        truncate_text("a" * 50, 40)  -> "a" * 40 + "..."
        truncate_text("a" * 30, 40)  -> "a" * 30
    """
    if len(text) <= limit:
        return text
    return text[:limit] + marker
