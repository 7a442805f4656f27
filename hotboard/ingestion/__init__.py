"""Feed ingestion module - transport, parsers, normalizers and adapters."""

from hotboard.ingestion.schemas import (
    CanonicalItem,
    NormalizedFeed,
    SourceKind,
)

__all__ = [
    "SourceKind",
    "CanonicalItem",
    "NormalizedFeed",
]
