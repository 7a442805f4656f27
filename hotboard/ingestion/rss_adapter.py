"""
RSS feed adapter.

Fetches feed markup as text and reduces it with the tolerant RSS parser. The
item cap and description pre-truncation come from the descriptor, falling
back to settings.
"""

import logging
from datetime import datetime

from hotboard.ingestion.base_adapter import BaseSourceAdapter
from hotboard.ingestion.http_client import HTTPClient
from hotboard.ingestion.rss_parser import parse_rss
from hotboard.ingestion.schemas import NormalizedFeed, SourceKind

logger = logging.getLogger(__name__)


class RSSAdapter(BaseSourceAdapter):
    """Adapter for RSS 2.0 feeds."""

    kind = SourceKind.RSS

    @property
    def item_cap(self) -> int:
        return self.descriptor.item_cap or self.settings.rss_item_cap

    @property
    def description_limit(self) -> int:
        return self.descriptor.description_limit or self.settings.rss_description_limit

    async def fetch_raw(self, client: HTTPClient) -> str:
        return await client.fetch_text(self.descriptor.url)

    def normalize(self, raw: str, now: datetime) -> NormalizedFeed:
        items = parse_rss(
            raw,
            item_cap=self.item_cap,
            description_limit=self.description_limit,
            clock=lambda: now,
        )
        if not items:
            logger.info(f"{self.name}: feed contained no usable items")
        return NormalizedFeed(items=items)
