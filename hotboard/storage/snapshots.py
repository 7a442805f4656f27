"""
Snapshot persistence - one JSON file per source.

Snapshot file format:

    {
      "source": {"name", "description", "url", "lastUpdate"},
      "items": [{"title", "link", "description"?, "pubDate"?, ...}],
      "total": len(items)
    }

Status-envelope sources store ``code``, ``message`` and ``data`` in place of
``items``. Readers must accept both shapes.

Writes go to a temporary file in the snapshot directory and are moved into
place with os.replace, so readers never observe a truncated snapshot.
"""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from hotboard.config.sources import SourceDescriptor
from hotboard.ingestion.errors import ParseError
from hotboard.ingestion.schemas import NormalizedFeed

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def build_snapshot(
    descriptor: SourceDescriptor,
    feed: NormalizedFeed,
    updated_at: datetime,
) -> dict[str, Any]:
    """Wrap a normalized feed with its source metadata."""
    snapshot: dict[str, Any] = {
        "source": {
            "name": descriptor.name,
            "description": descriptor.description,
            "url": descriptor.url,
            "lastUpdate": updated_at.isoformat(),
        }
    }
    if feed.passthrough:
        snapshot["code"] = feed.code
        snapshot["message"] = feed.message
        snapshot["data"] = feed.data
    else:
        snapshot["items"] = [item.to_snapshot_dict() for item in feed.items]
    snapshot["total"] = feed.total
    return snapshot


def items_of(snapshot: dict[str, Any]) -> list[Any]:
    """
    Return the canonical list of a snapshot, whichever shape it has.

    Status-envelope snapshots whose ``data`` is an object (e.g. a daily digest)
    are returned as a one-element list.
    """
    if "items" in snapshot:
        return list(snapshot["items"] or [])
    data = snapshot.get("data")
    if data is None:
        return []
    if isinstance(data, list):
        return data
    return [data]


class SnapshotWriter:
    """
    Reads and atomically writes per-source snapshot files.

    Usage:
        writer = SnapshotWriter(Path("data"))
        snapshot = writer.write(descriptor, feed)
        stored = writer.read(descriptor.id)
    """

    def __init__(
        self,
        directory: Path,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """
        Initialize writer.

        Args:
            directory: Directory holding <source_id>.json files
            clock: Returns the wall-clock time stamped into lastUpdate
        """
        self.directory = Path(directory)
        self._clock = clock

    def path_for(self, source_id: str) -> Path:
        """Snapshot file path for a source id."""
        return self.directory / f"{source_id}.json"

    def exists(self, source_id: str) -> bool:
        return self.path_for(source_id).is_file()

    def write(self, descriptor: SourceDescriptor, feed: NormalizedFeed) -> dict[str, Any]:
        """
        Persist a snapshot for one source, replacing any previous one.

        lastUpdate is stamped at write time, not fetch time. An empty feed is
        still written.

        Returns:
            The snapshot dict that was written
        """
        snapshot = build_snapshot(descriptor, feed, self._clock())
        target = self.path_for(descriptor.id)
        self.directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(
            dir=self.directory,
            prefix=f".{descriptor.id}.",
            suffix=".tmp",
        )
        try:
            with open(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, ensure_ascii=False, indent=2)
                f.write("\n")
            os.replace(tmp_path, target)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

        logger.debug(f"Wrote snapshot {target} ({snapshot['total']} records)")
        return snapshot

    def read(self, source_id: str) -> dict[str, Any] | None:
        """
        Load a stored snapshot.

        Returns:
            Snapshot dict, or None if no snapshot exists for the source

        Raises:
            ParseError: If the file is not a valid snapshot
        """
        path = self.path_for(source_id)
        try:
            with open(path, encoding="utf-8") as f:
                snapshot = json.load(f)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as e:
            raise ParseError(f"Corrupt snapshot {path}: {e}") from e

        if not isinstance(snapshot, dict) or "source" not in snapshot:
            raise ParseError(f"Snapshot {path} is missing its source header")
        if "items" not in snapshot and "data" not in snapshot:
            raise ParseError(f"Snapshot {path} has neither items nor data")
        return snapshot

    def list_ids(self) -> list[str]:
        """Source ids that currently have a snapshot on disk."""
        if not self.directory.is_dir():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json") if not p.name.startswith("."))
