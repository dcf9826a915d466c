"""
Pipeline Conductor - Lightweight orchestration

Coordinates:
- Per-source refresh (adapter -> persisted document)
- Combine step (per-source documents -> all_agendas.json)
- CLI commands (refresh, fetch, combine)

Sources run one after another. A failing source is recorded and skipped;
its previous file stays on disk and the combine step still runs.
"""

import asyncio
import json
import sys
import time
from datetime import datetime
from typing import Dict, Optional

from config import config, get_logger
from database.source_store import SourceStore
from pipeline.click_types import SOURCE_KEY
from pipeline.combiner import combine_sources
from pipeline.models import RefreshReport, SourceRunResult, SyncStatus
from pipeline.protocols import Fetcher
from pipeline.utils import count_meetings_and_items, ensure_utc, utc_now
from vendors.adapters.base_adapter_async import AsyncBaseAdapter
from vendors.factory import build_adapters
from vendors.http_fetcher import AiohttpFetcher
from vendors.session_manager_async import AsyncSessionManager

logger = get_logger(__name__).bind(component="conductor")


class Conductor:
    """Runs the source adapters and the combine step"""

    def __init__(
        self,
        fetcher: Fetcher,
        store: SourceStore,
        adapters: Optional[Dict[str, AsyncBaseAdapter]] = None,
    ):
        """Initialize the conductor

        Args:
            fetcher: Upstream fetch capability shared by all adapters
            store: Where source documents are persisted
            adapters: Source key -> adapter, in run order (built from config when omitted)
        """
        self.fetcher = fetcher
        self.store = store
        self.adapters = adapters if adapters is not None else build_adapters(fetcher, store)
        logger.info("conductor initialized", sources=list(self.adapters))

    async def close(self):
        """Cleanup resources (HTTP sessions)"""
        await AsyncSessionManager.close_all()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    async def refresh_source(self, source_key: str, run_at: Optional[datetime] = None) -> SourceRunResult:
        """Fetch one source and persist its document.

        Failures are captured in the result; the source's previous file is
        left untouched.
        """
        run_at = ensure_utc(run_at) if run_at else utc_now()
        start_time = time.time()

        adapter = self.adapters.get(source_key)
        if adapter is None:
            return SourceRunResult(
                source_key=source_key,
                status=SyncStatus.FAILED,
                error_message=f"Unknown source: {source_key}",
            )

        try:
            document = await adapter.fetch_source(run_at)
            payload = document.to_json_dict()
            self.store.save(source_key, payload)
        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                "source refresh failed",
                source=source_key,
                error=str(e),
                error_type=type(e).__name__,
                duration_seconds=round(duration, 1),
            )
            return SourceRunResult(
                source_key=source_key,
                status=SyncStatus.FAILED,
                duration_seconds=duration,
                error_message=str(e),
            )

        meetings, items = count_meetings_and_items(payload)
        duration = time.time() - start_time
        logger.info(
            "source refreshed",
            source=source_key,
            meetings=meetings,
            items=items,
            duration_seconds=round(duration, 1),
        )
        return SourceRunResult(
            source_key=source_key,
            status=SyncStatus.COMPLETED,
            meetings_found=meetings,
            items_found=items,
            stale=bool(payload.get("stale", False)),
            duration_seconds=duration,
        )

    async def refresh_all(self, run_at: Optional[datetime] = None) -> RefreshReport:
        """Refresh every source in order, then combine"""
        run_at = ensure_utc(run_at) if run_at else utc_now()
        report = RefreshReport()

        for source_key in self.adapters:
            report.results.append(await self.refresh_source(source_key, run_at))

        combined = combine_sources(self.store, run_at)
        report.combined_path = self.store.path_for_combined()

        logger.info(
            "refresh complete",
            succeeded=report.succeeded,
            failed=report.failed,
            sources=len(combined.sources),
        )
        if report.all_failed:
            logger.error("all sources failed", failed=report.failed)
        return report


def main():
    """Entry point for the civic-agendas CLI"""
    import click

    def make_conductor() -> Conductor:
        store = SourceStore(config.ensure_data_dir())
        return Conductor(AiohttpFetcher(timeout_total=config.HTTP_TIMEOUT), store)

    @click.group(invoke_without_command=True)
    @click.pass_context
    def cli(ctx):
        """Houston civic agenda aggregation"""
        if ctx.invoked_subcommand is None:
            click.echo(ctx.get_help())

    @cli.command("refresh")
    def refresh():
        """Refresh every source and rebuild all_agendas.json"""
        async def run():
            async with make_conductor() as conductor:
                return await conductor.refresh_all()

        report = asyncio.run(run())
        click.echo(json.dumps(report.to_dict(), indent=2))
        if report.all_failed:
            sys.exit(1)

    @cli.command("fetch")
    @click.argument("source", type=SOURCE_KEY)
    def fetch(source):
        """Refresh a single source (no combine)"""
        async def run():
            async with make_conductor() as conductor:
                return await conductor.refresh_source(source)

        result = asyncio.run(run())
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.status == SyncStatus.FAILED:
            sys.exit(1)

    @cli.command("combine")
    def combine():
        """Rebuild all_agendas.json from the persisted source files"""
        store = SourceStore(config.ensure_data_dir())
        combined = combine_sources(store)
        click.echo(f"Combined {len(combined.sources)} sources into {store.path_for_combined()}")

    cli()


if __name__ == "__main__":
    main()
