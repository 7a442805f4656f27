"""Source listing and snapshot read endpoints."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from hotboard.api.dependencies import get_snapshot_writer, get_sources
from hotboard.api.models import (
    ErrorResponse,
    SnapshotResponse,
    SnapshotSource,
    SourceItem,
    SourcesListResponse,
)
from hotboard.config.sources import SourceDescriptor
from hotboard.ingestion.errors import ParseError
from hotboard.storage.snapshots import SnapshotWriter, items_of

logger = structlog.get_logger(__name__)
router = APIRouter()


def _read_or_none(writer: SnapshotWriter, source_id: str) -> dict | None:
    try:
        return writer.read(source_id)
    except ParseError as e:
        logger.warning("Unreadable snapshot", source_id=source_id, error=str(e))
        return None


@router.get(
    "/sources",
    response_model=SourcesListResponse,
    summary="List configured sources",
)
async def list_sources(
    sources: list[SourceDescriptor] = Depends(get_sources),
    writer: SnapshotWriter = Depends(get_snapshot_writer),
) -> SourcesListResponse:
    items = []
    for s in sources:
        snapshot = _read_or_none(writer, s.id)
        items.append(
            SourceItem(
                id=s.id,
                name=s.name,
                description=s.description,
                url=s.url,
                kind=s.kind.value,
                enabled=s.enabled,
                has_snapshot=snapshot is not None,
                last_update=snapshot["source"].get("lastUpdate") if snapshot else None,
                total=snapshot.get("total") if snapshot else None,
            )
        )
    return SourcesListResponse(sources=items, total=len(items))


@router.get(
    "/snapshots/{source_id}",
    response_model=SnapshotResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get the stored snapshot for a source",
)
async def get_snapshot(
    source_id: str,
    limit: int | None = Query(default=None, ge=1, le=500, description="Max items"),
    writer: SnapshotWriter = Depends(get_snapshot_writer),
) -> SnapshotResponse:
    if "/" in source_id or source_id.startswith("."):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown source")

    try:
        snapshot = writer.read(source_id)
    except ParseError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        ) from e

    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No snapshot for source '{source_id}'",
        )

    items = items_of(snapshot)
    if limit is not None:
        items = items[:limit]

    return SnapshotResponse(
        source_id=source_id,
        source=SnapshotSource.model_validate(snapshot["source"]),
        items=items,
        total=snapshot.get("total", len(items_of(snapshot))),
        code=snapshot.get("code"),
        message=snapshot.get("message"),
    )
