"""
JSON API envelope normalization.

Two envelope shapes are accepted:

- Items envelope ``{"items": [...]}``: entries are mapped to CanonicalItem
  (``url`` preferred over ``link``) with HTML entities decoded.
- Status envelope ``{"code": ..., "message": ..., "data": ...}``: a non-success
  code raises UpstreamError; otherwise ``data`` is passed through verbatim.
"""

import html
import logging
from typing import Any

from pydantic import ValidationError

from hotboard.ingestion.dates import parse_datetime
from hotboard.ingestion.errors import ParseError, UpstreamError
from hotboard.ingestion.schemas import CanonicalItem, NormalizedFeed

logger = logging.getLogger(__name__)

SUCCESS_CODE = 200

# Fields consumed into CanonicalItem; everything else goes to `extra`
_CANONICAL_FIELDS = {"title", "link", "url", "description", "pubDate"}


def _decode(value: Any) -> Any:
    """HTML-entity decode strings; leave other values untouched."""
    if isinstance(value, str):
        return html.unescape(value).strip()
    return value


def entry_link(entry: dict[str, Any]) -> Any:
    """Canonical link accessor: ``url`` when present, else ``link``."""
    url = entry.get("url")
    return url if url else entry.get("link")


def to_canonical_item(
    entry: Any,
    title_field: str = "title",
    link_field: str | None = None,
) -> CanonicalItem | None:
    """
    Map one JSON entry to a CanonicalItem.

    Returns None (and logs at debug) if the entry is not an object or lacks a
    non-empty title or link.
    """
    if not isinstance(entry, dict):
        return None

    link = entry.get(link_field) if link_field else None
    if not link:
        link = entry_link(entry)
    description = entry.get("description")
    pub_date = entry.get("pubDate")

    consumed = _CANONICAL_FIELDS | {title_field}
    if link_field:
        consumed.add(link_field)
    extra = {k: v for k, v in entry.items() if k not in consumed}

    try:
        return CanonicalItem(
            title=_decode(entry.get(title_field)),
            link=_decode(link),
            description=_decode(description) if description is not None else None,
            pub_date=str(pub_date) if pub_date is not None else None,
            published_at=parse_datetime(pub_date),
            extra=extra,
        )
    except ValidationError as e:
        logger.debug(f"Dropping invalid item: {e.error_count()} validation errors")
        return None


def normalize_items(entries: Any, **field_map: Any) -> list[CanonicalItem]:
    """Map a list of JSON entries to canonical items, dropping invalid ones."""
    if not isinstance(entries, list):
        raise ParseError(f"Expected a list of items, got {type(entries).__name__}")

    items = []
    for entry in entries:
        item = to_canonical_item(entry, **field_map)
        if item is not None:
            items.append(item)
    return items


def check_status(payload: dict[str, Any], success_code: int = SUCCESS_CODE) -> None:
    """
    Validate a status envelope's code.

    Raises:
        UpstreamError: When ``code`` is present and not the success code
    """
    if "code" not in payload:
        return
    code = payload["code"]
    if code != success_code and str(code) != str(success_code):
        raise UpstreamError(code, payload.get("message"))


def normalize_envelope(payload: Any, success_code: int = SUCCESS_CODE) -> NormalizedFeed:
    """
    Normalize a parsed JSON response.

    Args:
        payload: Parsed JSON value from the transport
        success_code: The envelope code that signals success

    Returns:
        NormalizedFeed with canonical items (items envelope) or verbatim data
        (status envelope)

    Raises:
        UpstreamError: Status envelope with a failure code
        ParseError: Payload matches neither envelope shape
    """
    if not isinstance(payload, dict):
        raise ParseError(f"Expected a JSON object envelope, got {type(payload).__name__}")

    check_status(payload, success_code)

    if "items" in payload:
        return NormalizedFeed(items=normalize_items(payload["items"]))

    if "data" in payload or "code" in payload:
        return NormalizedFeed(
            data=payload.get("data"),
            code=payload.get("code", success_code),
            message=payload.get("message"),
            passthrough=True,
        )

    raise ParseError(
        f"Unrecognized envelope with keys: {sorted(payload.keys())[:10]}"
    )
