"""
Snapshot service - runs every configured source through the pipeline.

For each source, independently and concurrently:

    PENDING -> FETCHING -> NORMALIZING -> POSTPROCESSING -> WRITING -> WRITTEN
                      \\____________________ FAILED ____________________/

Sources with a fresh cache entry are skipped (CACHED). A failure in one
source is logged, recorded in the run summary and never affects the others;
its previous snapshot stays on disk. A run-level timeout cancels whatever is
still in flight and records those sources as FAILED with a timeout error.
"""

import asyncio
import contextlib
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import structlog

from hotboard.config.settings import Settings, get_settings
from hotboard.config.sources import SourceDescriptor, load_sources
from hotboard.ingestion.base_adapter import BaseSourceAdapter
from hotboard.ingestion.errors import ConfigurationError, FetchTimeoutError
from hotboard.ingestion.http_client import HTTPClient
from hotboard.ingestion.registry import create_adapter
from hotboard.observability.logging import bind_context
from hotboard.observability.metrics import MetricsCollector, get_metrics
from hotboard.storage.cache import CacheEntry, FeedCache
from hotboard.storage.snapshots import SnapshotWriter

logger = structlog.get_logger(__name__)


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


class SourceState(str, Enum):
    """Pipeline state of a single source within a run."""

    PENDING = "pending"
    FETCHING = "fetching"
    NORMALIZING = "normalizing"
    POSTPROCESSING = "postprocessing"
    WRITING = "writing"
    WRITTEN = "written"
    FAILED = "failed"
    CACHED = "cached"


@dataclass
class SourceOutcome:
    """Final result of one source in a run."""

    source_id: str
    state: SourceState
    stage: SourceState | None = None
    error: str | None = None
    error_type: str | None = None
    items: int = 0
    elapsed_seconds: float = 0.0

    @property
    def failed(self) -> bool:
        return self.state == SourceState.FAILED

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "source_id": self.source_id,
            "state": self.state.value,
            "items": self.items,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
        }
        if self.failed:
            data["stage"] = self.stage.value if self.stage else None
            data["error_type"] = self.error_type
            data["error"] = self.error
        return data


@dataclass
class RunSummary:
    """
    Append-only record of source outcomes for one run.

    record() is guarded by an asyncio.Lock since every source task reports
    into the same summary.
    """

    started_at: datetime
    finished_at: datetime | None = None
    outcomes: list[SourceOutcome] = field(default_factory=list)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    async def record(self, outcome: SourceOutcome) -> None:
        async with self._lock:
            self.outcomes.append(outcome)

    def has(self, source_id: str) -> bool:
        return any(o.source_id == source_id for o in self.outcomes)

    @property
    def written(self) -> list[SourceOutcome]:
        return [o for o in self.outcomes if o.state == SourceState.WRITTEN]

    @property
    def failures(self) -> list[SourceOutcome]:
        return [o for o in self.outcomes if o.failed]

    @property
    def cached(self) -> list[SourceOutcome]:
        return [o for o in self.outcomes if o.state == SourceState.CACHED]

    def to_dict(self) -> dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "written": len(self.written),
            "failed": len(self.failures),
            "cached": len(self.cached),
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


@dataclass
class RunResult:
    """Run summary plus the cache value to pass into the next run."""

    summary: RunSummary
    cache: FeedCache


@dataclass
class _Progress:
    """Mutable per-source state, readable after the task is cancelled."""

    state: SourceState = SourceState.PENDING
    started: float = field(default_factory=time.monotonic)
    items: int = 0


class SnapshotService:
    """
    Orchestrates one snapshot run across all configured sources.

    Usage:
        service = SnapshotService()
        result = await service.run()
        result = await service.run(cache=result.cache)  # next cycle
    """

    def __init__(
        self,
        sources: list[SourceDescriptor] | None = None,
        writer: SnapshotWriter | None = None,
        settings: Settings | None = None,
        metrics: MetricsCollector | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """
        Initialize snapshot service.

        Args:
            sources: Source descriptors (or load from settings.sources_file)
            writer: Snapshot writer (or create for settings.snapshot_dir)
            settings: Settings (or the cached global settings)
            metrics: Metrics collector (or the global collector)
            clock: Returns "now" for normalization and cache stamping

        Raises:
            ConfigurationError: If the source list cannot be loaded
        """
        self._settings = settings or get_settings()
        self._sources = (
            sources if sources is not None else load_sources(self._settings.sources_file)
        )
        self._writer = writer or SnapshotWriter(self._settings.snapshot_dir)
        self._metrics = metrics or get_metrics()
        self._clock = clock

        logger.info(
            "Snapshot service initialized",
            sources=[s.id for s in self._sources],
            snapshot_dir=str(self._writer.directory),
        )

    @property
    def sources(self) -> list[SourceDescriptor]:
        return list(self._sources)

    @property
    def writer(self) -> SnapshotWriter:
        return self._writer

    def _select(self, only: Iterable[str] | None) -> list[SourceDescriptor]:
        """Pick the sources for this run, validating requested ids."""
        if only is None:
            return [s for s in self._sources if s.enabled]

        wanted = list(only)
        by_id = {s.id: s for s in self._sources}
        unknown = [source_id for source_id in wanted if source_id not in by_id]
        if unknown:
            raise ConfigurationError(f"Unknown source id(s): {', '.join(unknown)}")
        return [by_id[source_id] for source_id in dict.fromkeys(wanted)]

    async def run(
        self,
        cache: FeedCache | None = None,
        only: Iterable[str] | None = None,
        timeout: float | None = None,
    ) -> RunResult:
        """
        Run one snapshot cycle.

        Args:
            cache: Cache from the previous run (fresh sources are skipped)
            only: Restrict the run to these source ids (disabled ones included)
            timeout: Run-level timeout in seconds (defaults to settings)

        Returns:
            RunResult with the summary and the updated cache

        Raises:
            ConfigurationError: Before any fetch, if the selection or an
                adapter cannot be resolved
        """
        cache = cache or FeedCache()
        timeout = timeout if timeout is not None else self._settings.run_timeout_seconds
        selected = self._select(only)
        adapters = [create_adapter(s, self._settings) for s in selected]

        summary = RunSummary(started_at=self._clock())
        run_start = time.monotonic()
        semaphore = (
            asyncio.Semaphore(self._settings.max_concurrency)
            if self._settings.concurrency_limited
            else None
        )

        now = self._clock()
        due: list[BaseSourceAdapter] = []
        for adapter in adapters:
            source_id = adapter.descriptor.id
            if cache.is_fresh(source_id, now, self._settings.cache_ttl_seconds):
                entry = cache.get(source_id)
                await summary.record(
                    SourceOutcome(source_id, SourceState.CACHED, items=entry.total)
                )
                self._metrics.record_source_cached(source_id)
                logger.debug("Cache fresh, skipping source", source_id=source_id)
            else:
                due.append(adapter)

        logger.info("Starting snapshot run", sources=len(due), cached=len(summary.cached))

        if due:
            async with HTTPClient(
                timeout=self._settings.http_timeout_seconds,
                user_agent=self._settings.user_agent,
            ) as client:
                await self._run_all(due, client, summary, semaphore, timeout)

        summary.finished_at = self._clock()
        elapsed = time.monotonic() - run_start
        self._metrics.record_run(elapsed)

        updates = {
            o.source_id: CacheEntry(fetched_at=summary.finished_at, total=o.items)
            for o in summary.written
        }

        logger.info(
            "Snapshot run completed",
            written=len(summary.written),
            failed=len(summary.failures),
            cached=len(summary.cached),
            elapsed_seconds=round(elapsed, 2),
        )
        return RunResult(summary=summary, cache=cache.with_entries(updates))

    async def _run_all(
        self,
        adapters: list[BaseSourceAdapter],
        client: HTTPClient,
        summary: RunSummary,
        semaphore: asyncio.Semaphore | None,
        timeout: float | None,
    ) -> None:
        """Run all source pipelines concurrently under the run-level timeout."""
        progress = {a.descriptor.id: _Progress() for a in adapters}
        tasks = {
            asyncio.create_task(
                self._run_source(a, client, summary, progress[a.descriptor.id], semaphore),
                name=f"source_{a.descriptor.id}",
            ): a.descriptor
            for a in adapters
        }

        _, pending = await asyncio.wait(tasks.keys(), timeout=timeout)

        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        for task in pending:
            descriptor = tasks[task]
            if summary.has(descriptor.id):
                continue
            state = progress[descriptor.id]
            elapsed = time.monotonic() - state.started
            if state.state == SourceState.WRITTEN:
                await summary.record(
                    SourceOutcome(
                        descriptor.id,
                        SourceState.WRITTEN,
                        items=state.items,
                        elapsed_seconds=elapsed,
                    )
                )
                continue

            error = FetchTimeoutError(f"Run timed out after {timeout}s")
            await self._record_failure(summary, descriptor, state.state, error, elapsed)

    async def _run_source(
        self,
        adapter: BaseSourceAdapter,
        client: HTTPClient,
        summary: RunSummary,
        progress: _Progress,
        semaphore: asyncio.Semaphore | None,
    ) -> None:
        """Run fetch -> normalize -> postprocess -> write for one source."""
        descriptor = adapter.descriptor
        bind_context(source_id=descriptor.id)

        try:
            async with semaphore or contextlib.nullcontext():
                progress.started = time.monotonic()

                progress.state = SourceState.FETCHING
                raw = await adapter.fetch_raw(client)

                progress.state = SourceState.NORMALIZING
                now = self._clock()
                feed = adapter.normalize(raw, now)

                progress.state = SourceState.POSTPROCESSING
                feed = adapter.postprocess(feed, now)

                progress.state = SourceState.WRITING
                self._writer.write(descriptor, feed)
                progress.items = feed.total
                progress.state = SourceState.WRITTEN

        except asyncio.CancelledError:
            raise
        except Exception as e:
            elapsed = time.monotonic() - progress.started
            await self._record_failure(summary, descriptor, progress.state, e, elapsed)
            return

        elapsed = time.monotonic() - progress.started
        self._metrics.record_source_written(descriptor.id, progress.items, elapsed)
        logger.info(
            "Snapshot written",
            source_id=descriptor.id,
            items=progress.items,
            elapsed_seconds=round(elapsed, 2),
        )
        await summary.record(
            SourceOutcome(
                descriptor.id,
                SourceState.WRITTEN,
                items=progress.items,
                elapsed_seconds=elapsed,
            )
        )

    async def _record_failure(
        self,
        summary: RunSummary,
        descriptor: SourceDescriptor,
        stage: SourceState,
        error: Exception,
        elapsed: float,
    ) -> None:
        error_type = type(error).__name__
        logger.warning(
            "Source failed",
            source_id=descriptor.id,
            stage=stage.value,
            error_type=error_type,
            error=str(error),
        )
        self._metrics.record_source_failed(descriptor.id, stage.value, error_type)
        await summary.record(
            SourceOutcome(
                descriptor.id,
                SourceState.FAILED,
                stage=stage,
                error=str(error),
                error_type=error_type,
                elapsed_seconds=elapsed,
            )
        )
