"""Pytest fixtures for hotboard tests."""

from datetime import datetime, timezone
from pathlib import Path

import pytest
from prometheus_client import CollectorRegistry

from hotboard.config.settings import Settings
from hotboard.config.sources import SourceDescriptor
from hotboard.ingestion.schemas import SourceKind
from hotboard.observability.metrics import MetricsCollector
from hotboard.storage.snapshots import SnapshotWriter

FIXED_NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


def make_descriptor(
    source_id: str = "example",
    kind: SourceKind = SourceKind.JSON_API,
    url: str | None = None,
    **kwargs,
) -> SourceDescriptor:
    """Helper to create a SourceDescriptor with sensible defaults."""
    return SourceDescriptor(
        id=source_id,
        url=url or f"https://feeds.example.com/{source_id}",
        kind=kind,
        name=kwargs.pop("name", source_id.title()),
        description=kwargs.pop("description", f"{source_id} feed"),
        **kwargs,
    )


def rss_item(
    title: str | None = "Title",
    link: str | None = "https://example.com/a",
    description: str | None = None,
    pub_date: str | None = None,
) -> str:
    """Build one <item> block; None omits the element."""
    parts = ["<item>"]
    if title is not None:
        parts.append(f"<title>{title}</title>")
    if link is not None:
        parts.append(f"<link>{link}</link>")
    if description is not None:
        parts.append(f"<description>{description}</description>")
    if pub_date is not None:
        parts.append(f"<pubDate>{pub_date}</pubDate>")
    parts.append("</item>")
    return "".join(parts)


def rss_document(*items: str) -> str:
    """Wrap item blocks in a minimal RSS 2.0 channel."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel><title>Example</title>'
        "<link>https://example.com</link>"
        + "".join(items)
        + "</channel></rss>"
    )


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def snapshot_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def test_settings(snapshot_dir: Path) -> Settings:
    """Settings configured for testing."""
    return Settings(
        environment="development",
        log_level="DEBUG",
        snapshot_dir=snapshot_dir,
        http_timeout_seconds=2.0,
        run_timeout_seconds=5.0,
        cache_ttl_seconds=300,
    )


@pytest.fixture
def writer(snapshot_dir: Path) -> SnapshotWriter:
    return SnapshotWriter(snapshot_dir, clock=lambda: FIXED_NOW)


@pytest.fixture
def metrics() -> MetricsCollector:
    """Metrics collector on an isolated registry."""
    return MetricsCollector(registry=CollectorRegistry())
