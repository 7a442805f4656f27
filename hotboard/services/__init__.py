"""Services that orchestrate snapshot runs."""

from hotboard.services.snapshot_service import RunResult, RunSummary, SnapshotService

__all__ = ["SnapshotService", "RunResult", "RunSummary"]
