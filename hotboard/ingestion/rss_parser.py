"""
RSS feed parsing on top of feedparser.

feedparser copes with the feeds found in the wild (stray ampersands, HTML in
descriptions, undeclared namespaces, Atom instead of RSS) and falls back to a
loose parser when the markup is not well-formed. This module applies the
snapshot rules on top of its entries:

- Entries without a title or link are dropped
- Markup is stripped from titles and descriptions
- Descriptions are cut to ``description_limit`` characters
- Entries without a parseable date sort as "now"
- The most recent ``item_cap`` entries are kept, newest first

Each item carries its resolved epoch-millisecond ``timestamp`` as an extra
field, so the dashboard can sort without parsing pubDate itself.
"""

import calendar
import html
import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable

import feedparser
from bs4 import BeautifulSoup
from pydantic import ValidationError

from hotboard.ingestion.dates import parse_datetime
from hotboard.ingestion.schemas import CanonicalItem

logger = logging.getLogger(__name__)

DEFAULT_ITEM_CAP = 20
DEFAULT_DESCRIPTION_LIMIT = 200

_TAG_RE = re.compile(r"<[^>]*>")


def strip_markup(text: str) -> str:
    """
    Remove markup tags and decode entities, collapsing whitespace.

    Plain-text fields in RSS often carry escaped HTML (``&lt;p&gt;``), so the
    text is unescaped before and after tag removal.
    """
    text = html.unescape(text)
    if "<" in text:
        text = BeautifulSoup(text, "html.parser").get_text(" ")
        # html.parser leaves fragments of broken tags behind
        text = _TAG_RE.sub("", text)
    text = html.unescape(text)
    return " ".join(text.split())


def _entry_date(entry: Any) -> tuple[str, datetime | None]:
    """Return the raw date string and its resolved timestamp, if any."""
    for field in ("published", "updated"):
        raw = (entry.get(field) or "").strip()
        if not raw:
            continue
        parsed = parse_datetime(raw)
        if parsed is None and entry.get(f"{field}_parsed"):
            parsed = datetime.fromtimestamp(
                calendar.timegm(entry[f"{field}_parsed"]), tz=timezone.utc
            )
        return raw, parsed
    return "", None


def _to_item(
    entry: Any, description_limit: int, now: datetime
) -> CanonicalItem | None:
    title = entry.get("title")
    link = entry.get("link")
    if not title or not link:
        return None

    summary = entry.get("summary")
    description = strip_markup(summary)[:description_limit] if summary else ""
    pub_date, published_at = _entry_date(entry)
    published_at = published_at or now

    try:
        return CanonicalItem(
            title=strip_markup(title),
            link=link.strip(),
            description=description,
            pub_date=pub_date,
            published_at=published_at,
            extra={"timestamp": int(published_at.timestamp() * 1000)},
        )
    except ValidationError:
        return None


def parse_rss(
    xml_text: str,
    item_cap: int = DEFAULT_ITEM_CAP,
    description_limit: int = DEFAULT_DESCRIPTION_LIMIT,
    clock: Callable[[], datetime] | None = None,
) -> list[CanonicalItem]:
    """
    Parse feed markup into canonical items, most recent first.

    Args:
        xml_text: Raw feed markup
        item_cap: Maximum number of items returned
        description_limit: Description pre-truncation length in characters
        clock: Returns "now"; used for items without a parseable pubDate

    Returns:
        Up to item_cap items sorted descending by resolved timestamp.
        Empty list when the feed has no entries.
    """
    now = (clock or (lambda: datetime.now(timezone.utc)))()
    feed = feedparser.parse(xml_text)
    entries = feed.get("entries", [])

    items = [
        item
        for item in (_to_item(entry, description_limit, now) for entry in entries)
        if item is not None
    ]

    if len(items) < len(entries):
        logger.debug(f"Dropped {len(entries) - len(items)} RSS items missing title or link")
    if not entries and feed.get("bozo"):
        logger.debug(f"Feed markup not recognized: {feed.get('bozo_exception')}")

    items.sort(key=lambda i: i.published_at, reverse=True)
    return items[:item_cap]
