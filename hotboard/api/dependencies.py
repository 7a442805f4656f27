"""
Dependency injection for FastAPI endpoints.
"""

from fastapi import HTTPException, status

from hotboard.config.settings import get_settings
from hotboard.config.sources import SourceDescriptor, load_sources
from hotboard.ingestion.errors import ConfigurationError
from hotboard.storage.snapshots import SnapshotWriter


def get_snapshot_writer() -> SnapshotWriter:
    """Snapshot store rooted at settings.snapshot_dir."""
    return SnapshotWriter(get_settings().snapshot_dir)


def get_sources() -> list[SourceDescriptor]:
    """
    Configured source descriptors.

    The list is re-read per request so edits to the source file show up
    without a restart.
    """
    try:
        return load_sources(get_settings().sources_file)
    except ConfigurationError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        ) from e
