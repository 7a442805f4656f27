"""
Command-line interface for hotboard.

Usage:
    hotboard fetch              # Run one snapshot cycle for all sources
    hotboard fetch -s weibo     # Only the given source(s)
    hotboard watch              # Run cycles forever, reusing the cache
    hotboard sources            # List configured sources
    hotboard show weibo         # Print a stored snapshot
    hotboard serve              # Serve snapshots over HTTP
"""

import asyncio
import json
import signal
import sys

import click

from hotboard.config.settings import get_settings
from hotboard.ingestion.errors import ConfigurationError, ParseError
from hotboard.observability.logging import setup_logging
from hotboard.observability.metrics import get_metrics

# Exit status for configuration errors (matches click's usage-error code)
CONFIG_ERROR_EXIT = 2


def _config_error(e: ConfigurationError) -> None:
    click.echo(f"Configuration error: {e}", err=True)
    sys.exit(CONFIG_ERROR_EXIT)


def _print_summary(summary, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(summary.to_dict(), ensure_ascii=False, indent=2))
        return

    for outcome in summary.outcomes:
        if outcome.failed:
            stage = outcome.stage.value if outcome.stage else "?"
            click.echo(
                f"  FAILED   {outcome.source_id:<20} [{stage}] "
                f"{outcome.error_type}: {outcome.error}"
            )
        else:
            click.echo(
                f"  {outcome.state.value.upper():<8} {outcome.source_id:<20} "
                f"{outcome.items} records"
            )
    click.echo(
        f"Run complete: {len(summary.written)} written, "
        f"{len(summary.failures)} failed, {len(summary.cached)} cached"
    )


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Hotboard - hot-list and news feed snapshots."""
    if debug:
        import os
        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()

    setup_logging()


@main.command()
@click.option("--source", "-s", "source_ids", multiple=True, help="Only fetch these source ids")
@click.option("--timeout", type=float, default=None, help="Run-level timeout in seconds")
@click.option("--json", "as_json", is_flag=True, help="Print the run summary as JSON")
def fetch(source_ids: tuple[str, ...], timeout: float | None, as_json: bool) -> None:
    """Run one snapshot cycle."""
    from hotboard.services.snapshot_service import SnapshotService

    async def run():
        service = SnapshotService()
        return await service.run(only=source_ids or None, timeout=timeout)

    try:
        result = asyncio.run(run())
    except ConfigurationError as e:
        _config_error(e)
        return

    _print_summary(result.summary, as_json)


@main.command()
@click.option("--interval", type=int, default=None, help="Seconds between cycles")
@click.option("--metrics/--no-metrics", default=None, help="Enable metrics server")
def watch(interval: int | None, metrics: bool | None) -> None:
    """Run snapshot cycles until interrupted."""
    from hotboard.services.snapshot_service import SnapshotService

    settings = get_settings()
    interval = interval or settings.watch_interval_seconds
    metrics_enabled = settings.metrics_enabled if metrics is None else metrics

    async def run():
        service = SnapshotService()
        if metrics_enabled:
            get_metrics().start_server()

        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, stop.set)

        result = None
        while not stop.is_set():
            result = await service.run(cache=result.cache if result else None)
            _print_summary(result.summary, as_json=False)
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass

    try:
        asyncio.run(run())
    except ConfigurationError as e:
        _config_error(e)


@main.command("sources")
def list_sources() -> None:
    """List configured sources."""
    from hotboard.config.sources import load_sources

    try:
        sources = load_sources(get_settings().sources_file)
    except ConfigurationError as e:
        _config_error(e)
        return

    for s in sources:
        flag = "" if s.enabled else " (disabled)"
        click.echo(f"{s.id:<20} {s.kind.value:<9} {s.name}{flag}")
        click.echo(f"{'':<20} {s.url}")


@main.command()
@click.argument("source_id")
@click.option("--limit", "-n", type=int, default=10, help="Items to print")
def show(source_id: str, limit: int) -> None:
    """Print a stored snapshot."""
    from hotboard.storage.snapshots import SnapshotWriter, items_of

    writer = SnapshotWriter(get_settings().snapshot_dir)
    try:
        snapshot = writer.read(source_id)
    except ParseError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if snapshot is None:
        click.echo(f"No snapshot for '{source_id}' in {writer.directory}", err=True)
        sys.exit(1)

    source = snapshot["source"]
    click.echo(f"{source.get('name')} - {source.get('description', '')}")
    click.echo(f"Updated: {source.get('lastUpdate')}  Total: {snapshot.get('total')}")

    for index, item in enumerate(items_of(snapshot)[:limit], start=1):
        if isinstance(item, dict):
            title = item.get("title", "")
            link = item.get("url") or item.get("link") or ""
            click.echo(f"{index:>3}. {title}")
            if link:
                click.echo(f"     {link}")
        else:
            click.echo(f"{index:>3}. {json.dumps(item, ensure_ascii=False)[:200]}")


@main.command()
@click.option("--host", default=None, help="Bind host")
@click.option("--port", type=int, default=None, help="Bind port")
def serve(host: str | None, port: int | None) -> None:
    """Serve stored snapshots over HTTP."""
    import uvicorn

    from hotboard.api.app import create_app

    settings = get_settings()
    uvicorn.run(
        create_app(),
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
