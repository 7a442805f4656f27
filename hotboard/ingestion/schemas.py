"""
Canonical item schema for the hotboard snapshot pipeline.

CRITICAL: This schema is what the dashboard reads from every snapshot file.
All source adapters MUST reduce their upstream shape to CanonicalItem (or pass
a status-envelope payload through verbatim via NormalizedFeed.data).
Consumers may only rely on `title` and `link` being present.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SourceKind(str, Enum):
    """Supported upstream source kinds."""

    RSS = "rss"
    JSON_API = "json_api"
    CALENDAR = "calendar"


class CanonicalItem(BaseModel):
    """
    CANONICAL ITEM SCHEMA

    The unit of normalized content. `title` and `link` must be non-empty;
    constructing an item without them raises pydantic.ValidationError, which
    normalizers treat as "drop this item".
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, description="Display title, plain text")
    link: str = Field(..., min_length=1, description="Target URL")
    description: str | None = Field(
        default=None,
        description="Plain-text summary, already truncated upstream of rendering",
    )
    pub_date: str | None = Field(
        default=None,
        alias="pubDate",
        description="Publication date as provided by the upstream",
    )
    published_at: datetime | None = Field(
        default=None,
        exclude=True,
        description="Resolved publication timestamp, used for ordering only",
    )
    extra: dict[str, Any] = Field(
        default_factory=dict,
        description="Source-specific fields (e.g. IPO ticker code, subscription date)",
    )

    @field_validator("title", "link", mode="before")
    @classmethod
    def strip_required(cls, v: Any) -> Any:
        """Whitespace-only values count as missing."""
        if isinstance(v, str):
            return v.strip()
        return v

    def to_snapshot_dict(self) -> dict[str, Any]:
        """
        Convert to the snapshot file representation.

        Source-specific `extra` fields are flattened into the item, and absent
        optional fields are omitted.
        """
        data: dict[str, Any] = dict(self.extra)
        data["title"] = self.title
        data["link"] = self.link
        if self.description is not None:
            data["description"] = self.description
        if self.pub_date is not None:
            data["pubDate"] = self.pub_date
        return data


@dataclass
class NormalizedFeed:
    """
    Output of normalization for one source.

    Either `items` carries canonical items (items envelope), or `data` carries
    a status-envelope payload passed through verbatim with its `code` and
    `message`.
    """

    items: list[CanonicalItem] = field(default_factory=list)
    data: Any = None
    code: int | str | None = None
    message: str | None = None
    passthrough: bool = False

    @property
    def total(self) -> int:
        """Number of records in the feed."""
        if not self.passthrough:
            return len(self.items)
        if self.data is None:
            return 0
        if isinstance(self.data, list):
            return len(self.data)
        return 1
