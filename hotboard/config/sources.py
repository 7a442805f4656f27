"""
Static source descriptor list.

Sources are declared in a JSON file (``data/sources.json`` by default, or the
file named by SOURCES_FILE). Adding a source means appending one entry; the
pipeline selects its adapter from the ``kind`` field.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from hotboard.ingestion.errors import ConfigurationError
from hotboard.ingestion.schemas import SourceKind

logger = logging.getLogger(__name__)


class SourceDescriptor(BaseModel):
    """A configured upstream feed or API."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., pattern=r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")
    url: str = Field(..., min_length=1)
    kind: SourceKind
    name: str = Field(..., min_length=1)
    description: str = ""
    enabled: bool = True

    # RSS parameters
    item_cap: int | None = Field(default=None, ge=1)
    description_limit: int | None = Field(default=None, ge=1)

    # Calendar (date-windowed) parameters
    date_field: str | None = None
    window_days: int | None = Field(default=None, ge=0)
    title_field: str = "title"
    link_field: str | None = None
    truncate_fields: tuple[str, ...] = ()
    truncate_length: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def check_kind_parameters(self) -> "SourceDescriptor":
        if self.kind == SourceKind.CALENDAR and not self.date_field:
            raise ValueError(f"calendar source '{self.id}' requires date_field")
        return self


def parse_sources(entries: Any) -> list[SourceDescriptor]:
    """
    Validate raw descriptor entries.

    Raises:
        ConfigurationError: If the list is malformed or ids are duplicated
    """
    if not isinstance(entries, list):
        raise ConfigurationError("Source list must be a JSON array")

    descriptors: list[SourceDescriptor] = []
    seen: set[str] = set()
    for index, entry in enumerate(entries):
        try:
            descriptor = SourceDescriptor.model_validate(entry)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid source at index {index}: {e}") from e

        if descriptor.id in seen:
            raise ConfigurationError(f"Duplicate source id: {descriptor.id}")
        seen.add(descriptor.id)
        descriptors.append(descriptor)

    return descriptors


def load_sources(path: Path) -> list[SourceDescriptor]:
    """Load and validate the ordered source list from a JSON file."""
    try:
        with open(path, encoding="utf-8") as f:
            entries = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read source list {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Source list {path} is not valid JSON: {e}") from e

    descriptors = parse_sources(entries)
    logger.debug(f"Loaded {len(descriptors)} sources from {path}")
    return descriptors
