"""Pydantic response models for the snapshot API."""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = Field(..., description="healthy or degraded")
    version: str
    sources_configured: int
    snapshots_present: int
    snapshot_dir: str


class SourceItem(BaseModel):
    id: str
    name: str
    description: str
    url: str
    kind: str
    enabled: bool
    has_snapshot: bool
    last_update: str | None = None
    total: int | None = None


class SourcesListResponse(BaseModel):
    sources: list[SourceItem]
    total: int


class SnapshotSource(BaseModel):
    name: str
    description: str = ""
    url: str
    last_update: str = Field(..., alias="lastUpdate")

    model_config = {"populate_by_name": True}


class SnapshotResponse(BaseModel):
    """A stored snapshot with its canonical list exposed as `items`."""

    source_id: str
    source: SnapshotSource
    items: list[Any]
    total: int
    code: int | str | None = None
    message: str | None = None


class ErrorResponse(BaseModel):
    detail: str
