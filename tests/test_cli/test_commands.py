"""Tests for the hotboard CLI."""

import json
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from conftest import FIXED_NOW, make_descriptor

from hotboard.cli import CONFIG_ERROR_EXIT, main
from hotboard.config.settings import get_settings
from hotboard.ingestion.errors import ConfigurationError
from hotboard.ingestion.schemas import CanonicalItem, NormalizedFeed, SourceKind
from hotboard.services.snapshot_service import (
    RunResult,
    RunSummary,
    SourceOutcome,
    SourceState,
)
from hotboard.storage.cache import FeedCache
from hotboard.storage.snapshots import SnapshotWriter


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    """Point settings at temporary snapshot and source files."""
    sources_file = tmp_path / "sources.json"
    sources_file.write_text(
        json.dumps(
            [
                {
                    "id": "weibo",
                    "url": "https://api.example.com/weibo",
                    "kind": "json_api",
                    "name": "Weibo",
                    "description": "Weibo hot search",
                },
                {
                    "id": "ars",
                    "url": "https://feeds.example.com/ars",
                    "kind": "rss",
                    "name": "Ars Technica",
                    "enabled": False,
                },
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("SNAPSHOT_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("SOURCES_FILE", str(sources_file))
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()


def _result():
    summary = RunSummary(started_at=FIXED_NOW, finished_at=FIXED_NOW + timedelta(seconds=2))
    summary.outcomes = [
        SourceOutcome("weibo", SourceState.WRITTEN, items=50, elapsed_seconds=0.4),
        SourceOutcome(
            "zhihu",
            SourceState.FAILED,
            stage=SourceState.FETCHING,
            error="Request failed with status 503",
            error_type="NetworkError",
        ),
        SourceOutcome("bili", SourceState.CACHED, items=20),
    ]
    return RunResult(summary=summary, cache=FeedCache())


class TestFetchCommand:
    """Tests for `hotboard fetch`."""

    def test_prints_summary(self, runner, cli_env):
        with patch("hotboard.services.snapshot_service.SnapshotService") as service_cls:
            service_cls.return_value.run = AsyncMock(return_value=_result())

            result = runner.invoke(main, ["fetch"])

        assert result.exit_code == 0, result.output
        assert "weibo" in result.output
        assert "50 records" in result.output
        assert "FAILED" in result.output
        assert "NetworkError" in result.output
        assert "1 written, 1 failed, 1 cached" in result.output
        service_cls.return_value.run.assert_awaited_once_with(only=None, timeout=None)

    def test_source_and_timeout_options(self, runner, cli_env):
        with patch("hotboard.services.snapshot_service.SnapshotService") as service_cls:
            service_cls.return_value.run = AsyncMock(return_value=_result())

            result = runner.invoke(main, ["fetch", "-s", "weibo", "-s", "zhihu", "--timeout", "5"])

        assert result.exit_code == 0, result.output
        service_cls.return_value.run.assert_awaited_once_with(
            only=("weibo", "zhihu"), timeout=5.0
        )

    def test_json_output(self, runner, cli_env):
        with patch("hotboard.services.snapshot_service.SnapshotService") as service_cls:
            service_cls.return_value.run = AsyncMock(return_value=_result())

            result = runner.invoke(main, ["fetch", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["written"] == 1
        assert data["failed"] == 1
        assert [o["source_id"] for o in data["outcomes"]] == ["weibo", "zhihu", "bili"]

    def test_configuration_error_exit_code(self, runner, cli_env):
        with patch("hotboard.services.snapshot_service.SnapshotService") as service_cls:
            service_cls.return_value.run = AsyncMock(
                side_effect=ConfigurationError("Unknown source id(s): ghost")
            )

            result = runner.invoke(main, ["fetch", "-s", "ghost"])

        assert result.exit_code == CONFIG_ERROR_EXIT
        assert "Unknown source id(s): ghost" in result.output

    def test_broken_sources_file(self, runner, cli_env):
        (cli_env / "sources.json").write_text("[{", encoding="utf-8")

        result = runner.invoke(main, ["fetch"])

        assert result.exit_code == CONFIG_ERROR_EXIT
        assert "Configuration error" in result.output


class TestWatchCommand:
    """Tests for `hotboard watch`."""

    def test_configuration_error_exit_code(self, runner, cli_env):
        with patch(
            "hotboard.services.snapshot_service.SnapshotService",
            MagicMock(side_effect=ConfigurationError("bad sources")),
        ):
            result = runner.invoke(main, ["watch", "--no-metrics"])

        assert result.exit_code == CONFIG_ERROR_EXIT
        assert "bad sources" in result.output


class TestSourcesCommand:
    """Tests for `hotboard sources`."""

    def test_lists_sources(self, runner, cli_env):
        result = runner.invoke(main, ["sources"])

        assert result.exit_code == 0, result.output
        assert "weibo" in result.output
        assert "json_api" in result.output
        assert "https://api.example.com/weibo" in result.output
        assert "Ars Technica (disabled)" in result.output

    def test_missing_sources_file(self, runner, cli_env, monkeypatch):
        monkeypatch.setenv("SOURCES_FILE", str(cli_env / "missing.json"))
        get_settings.cache_clear()

        result = runner.invoke(main, ["sources"])

        assert result.exit_code == CONFIG_ERROR_EXIT


class TestShowCommand:
    """Tests for `hotboard show`."""

    def test_items_snapshot(self, runner, cli_env):
        writer = SnapshotWriter(cli_env / "data", clock=lambda: FIXED_NOW)
        items = [
            CanonicalItem(title=f"Story {i}", link=f"https://e.com/{i}") for i in range(5)
        ]
        writer.write(
            make_descriptor("ars", kind=SourceKind.RSS, name="Ars Technica"),
            NormalizedFeed(items=items),
        )

        result = runner.invoke(main, ["show", "ars", "-n", "2"])

        assert result.exit_code == 0, result.output
        assert "Ars Technica" in result.output
        assert "Total: 5" in result.output
        assert "1. Story 0" in result.output
        assert "2. Story 1" in result.output
        assert "Story 2" not in result.output
        assert "https://e.com/0" in result.output

    def test_passthrough_snapshot_prefers_url(self, runner, cli_env):
        writer = SnapshotWriter(cli_env / "data", clock=lambda: FIXED_NOW)
        feed = NormalizedFeed(
            data=[{"title": "热搜", "url": "https://s.weibo.com/u", "link": "https://s.weibo.com/l"}],
            code=200,
            message="ok",
            passthrough=True,
        )
        writer.write(make_descriptor("weibo", name="Weibo"), feed)

        result = runner.invoke(main, ["show", "weibo"])

        assert result.exit_code == 0, result.output
        assert "热搜" in result.output
        assert "https://s.weibo.com/u" in result.output

    def test_missing_snapshot(self, runner, cli_env):
        result = runner.invoke(main, ["show", "nothing"])

        assert result.exit_code == 1
        assert "No snapshot for 'nothing'" in result.output

    def test_corrupt_snapshot(self, runner, cli_env):
        data_dir = cli_env / "data"
        data_dir.mkdir()
        (data_dir / "broken.json").write_text("{oops", encoding="utf-8")

        result = runner.invoke(main, ["show", "broken"])

        assert result.exit_code == 1
        assert "Corrupt snapshot" in result.output


class TestServeCommand:
    """Tests for `hotboard serve`."""

    def test_runs_uvicorn_with_options(self, runner, cli_env):
        with patch("uvicorn.run") as uvicorn_run:
            result = runner.invoke(main, ["serve", "--host", "0.0.0.0", "--port", "9999"])

        assert result.exit_code == 0, result.output
        _, kwargs = uvicorn_run.call_args
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 9999
