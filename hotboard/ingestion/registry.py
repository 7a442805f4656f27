"""Registry mapping source kinds to their adapter classes."""

from hotboard.config.settings import Settings
from hotboard.config.sources import SourceDescriptor
from hotboard.ingestion.api_adapter import JSONAPIAdapter
from hotboard.ingestion.base_adapter import BaseSourceAdapter
from hotboard.ingestion.calendar_adapter import CalendarAdapter
from hotboard.ingestion.errors import ConfigurationError
from hotboard.ingestion.rss_adapter import RSSAdapter
from hotboard.ingestion.schemas import SourceKind

ADAPTERS: dict[SourceKind, type[BaseSourceAdapter]] = {
    SourceKind.RSS: RSSAdapter,
    SourceKind.JSON_API: JSONAPIAdapter,
    SourceKind.CALENDAR: CalendarAdapter,
}


def create_adapter(
    descriptor: SourceDescriptor,
    settings: Settings | None = None,
) -> BaseSourceAdapter:
    """Instantiate the adapter for a descriptor's kind."""
    adapter_cls = ADAPTERS.get(descriptor.kind)
    if adapter_cls is None:
        raise ConfigurationError(
            f"No adapter registered for kind '{descriptor.kind}' (source {descriptor.id})"
        )
    return adapter_cls(descriptor, settings)
