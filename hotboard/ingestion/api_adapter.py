"""JSON API adapter for hot-list endpoints returning items or status envelopes."""

from datetime import datetime
from typing import Any

from hotboard.ingestion.base_adapter import BaseSourceAdapter
from hotboard.ingestion.envelope import normalize_envelope
from hotboard.ingestion.http_client import HTTPClient
from hotboard.ingestion.schemas import NormalizedFeed, SourceKind


class JSONAPIAdapter(BaseSourceAdapter):
    """Adapter for JSON APIs wrapped in an items or status envelope."""

    kind = SourceKind.JSON_API

    async def fetch_raw(self, client: HTTPClient) -> Any:
        return await client.fetch_json(self.descriptor.url)

    def normalize(self, raw: Any, now: datetime) -> NormalizedFeed:
        return normalize_envelope(raw, success_code=self.settings.upstream_success_code)
