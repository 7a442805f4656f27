"""
Date-windowed calendar adapter (IPO / new issuance calendar).

The upstream returns a list of issues, each carrying a domain date field
(e.g. subscription date). Only the current window matters to the dashboard:

- Keep issues dated within [now - window_days, now + window_days]
- Sort by that date, latest first
- Truncate long free-text fields (business description)
- Stamp each issue with its relative-date bucket for display tiers
"""

import logging
from datetime import datetime
from typing import Any

from hotboard.ingestion.base_adapter import BaseSourceAdapter
from hotboard.ingestion.envelope import check_status, normalize_items
from hotboard.ingestion.errors import ParseError
from hotboard.ingestion.http_client import HTTPClient
from hotboard.ingestion.postprocess import (
    classify_relative_date,
    filter_date_window,
    item_field,
    truncate_text,
)
from hotboard.ingestion.schemas import CanonicalItem, NormalizedFeed, SourceKind

logger = logging.getLogger(__name__)


class CalendarAdapter(BaseSourceAdapter):
    """Adapter for date-windowed calendar sources."""

    kind = SourceKind.CALENDAR

    @property
    def window_days(self) -> int:
        if self.descriptor.window_days is not None:
            return self.descriptor.window_days
        return self.settings.date_window_days

    @property
    def truncate_length(self) -> int:
        return self.descriptor.truncate_length or self.settings.truncate_length

    async def fetch_raw(self, client: HTTPClient) -> Any:
        return await client.fetch_json(self.descriptor.url)

    def _entries(self, raw: Any) -> Any:
        """Unwrap either envelope shape, or accept a bare list."""
        if isinstance(raw, list):
            return raw
        if not isinstance(raw, dict):
            raise ParseError(f"Expected a JSON object or array, got {type(raw).__name__}")

        check_status(raw, self.settings.upstream_success_code)
        if "items" in raw:
            return raw["items"]
        if "data" in raw:
            return raw["data"] if raw["data"] is not None else []
        raise ParseError(f"Unrecognized calendar envelope with keys: {sorted(raw.keys())[:10]}")

    def normalize(self, raw: Any, now: datetime) -> NormalizedFeed:
        items = normalize_items(
            self._entries(raw),
            title_field=self.descriptor.title_field,
            link_field=self.descriptor.link_field,
        )
        return NormalizedFeed(items=items)

    def _decorate(self, item: CanonicalItem, now: datetime) -> CanonicalItem:
        extra = dict(item.extra)
        for field_name in self.descriptor.truncate_fields:
            value = extra.get(field_name)
            if isinstance(value, str):
                extra[field_name] = truncate_text(value, self.truncate_length)

        relative = classify_relative_date(item_field(item, self.descriptor.date_field), now)
        extra["dateBucket"] = relative.bucket.value
        extra["daysUntil"] = relative.days

        description = item.description
        if description is not None and "description" in self.descriptor.truncate_fields:
            description = truncate_text(description, self.truncate_length)

        return item.model_copy(update={"extra": extra, "description": description})

    def postprocess(self, feed: NormalizedFeed, now: datetime) -> NormalizedFeed:
        windowed = filter_date_window(
            feed.items,
            date_field=self.descriptor.date_field,
            now=now,
            window_days=self.window_days,
        )
        logger.debug(
            f"{self.name}: {len(windowed)}/{len(feed.items)} items inside "
            f"the +/-{self.window_days} day window"
        )
        return NormalizedFeed(items=[self._decorate(item, now) for item in windowed])
