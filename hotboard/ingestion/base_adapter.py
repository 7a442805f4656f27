"""
Base adapter interface for source kinds.

Each source kind has an adapter implementing the three pipeline stages the
orchestrator drives:

    fetch_raw()   -> raw payload (text or parsed JSON)
    normalize()   -> NormalizedFeed
    postprocess() -> NormalizedFeed with source-specific rules applied

Adapters hold only their descriptor and settings; one is created per source
per run.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, ClassVar

from hotboard.config.settings import Settings, get_settings
from hotboard.config.sources import SourceDescriptor
from hotboard.ingestion.http_client import HTTPClient
from hotboard.ingestion.schemas import NormalizedFeed, SourceKind


class BaseSourceAdapter(ABC):
    """
    Abstract base class for source adapters.

    Subclasses must implement:
        - kind: SourceKind class attribute
        - fetch_raw(): Fetch the raw payload through the shared HTTPClient
        - normalize(): Reduce the raw payload to a NormalizedFeed

    Subclasses may override postprocess() for source-specific rules.
    """

    kind: ClassVar[SourceKind]

    def __init__(self, descriptor: SourceDescriptor, settings: Settings | None = None):
        self.descriptor = descriptor
        self.settings = settings or get_settings()

    @property
    def name(self) -> str:
        """Human-readable adapter name."""
        return f"{self.kind.value}_adapter[{self.descriptor.id}]"

    @abstractmethod
    async def fetch_raw(self, client: HTTPClient) -> Any:
        """
        Fetch the raw payload for this source.

        Raises:
            NetworkError: On transport failures
            ParseError: When the body cannot be decoded
        """
        ...

    @abstractmethod
    def normalize(self, raw: Any, now: datetime) -> NormalizedFeed:
        """
        Reduce the raw payload to canonical form.

        Invalid items are dropped here, never raised.

        Raises:
            UpstreamError: The upstream reported a failure status
            ParseError: The payload shape is unrecognized
        """
        ...

    def postprocess(self, feed: NormalizedFeed, now: datetime) -> NormalizedFeed:
        """Apply source-specific rules. Default is a no-op."""
        return feed
