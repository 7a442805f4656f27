"""
Health check endpoint.
"""

import structlog
from fastapi import APIRouter, Depends

from hotboard import __version__
from hotboard.api.dependencies import get_snapshot_writer, get_sources
from hotboard.api.models import HealthResponse
from hotboard.config.sources import SourceDescriptor
from hotboard.storage.snapshots import SnapshotWriter

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get("/health", response_model=HealthResponse, summary="Service health")
async def health(
    sources: list[SourceDescriptor] = Depends(get_sources),
    writer: SnapshotWriter = Depends(get_snapshot_writer),
) -> HealthResponse:
    """Healthy when every enabled source has a snapshot on disk."""
    present = set(writer.list_ids())
    enabled = [s for s in sources if s.enabled]
    missing = [s.id for s in enabled if s.id not in present]
    if missing:
        logger.debug("Snapshots missing", sources=missing)

    return HealthResponse(
        status="degraded" if missing else "healthy",
        version=__version__,
        sources_configured=len(sources),
        snapshots_present=len(present & {s.id for s in sources}),
        snapshot_dir=str(writer.directory),
    )
