"""
Data service owning the current market data snapshot.

The pipeline is synchronous; the async load runs it in a worker thread and
shares one in-flight load between concurrent awaiters. A failed load keeps
the previous snapshot (if any) and records the error.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from pathlib import Path

from market_data.config import PipelineSettings, load_settings
from market_data.file_loader import ALLOWED_SUFFIXES, read_source_text
from market_data.logger import get_logger
from market_data.pipeline import MarketDataSnapshot, build_market_snapshot

logger = get_logger(__name__)

STATUS_IDLE = "idle"
STATUS_LOADING = "loading"
STATUS_READY = "ready"
STATUS_FAILED = "failed"


def _is_path(source: Path | str) -> bool:
    if isinstance(source, Path):
        return True
    if "\n" in source:
        return False
    try:
        if Path(source).is_file():
            return True
    except OSError:
        return False
    # A missing file named like a source file should fail as a missing file
    return Path(source).suffix.lower() in ALLOWED_SUFFIXES


class MarketDataService:
    """
    Loads source data into an immutable snapshot and tracks load status.

    Args:
        settings: Pipeline settings. Defaults to load_settings().
        source: Default source (delimited text or a file path).
    """

    def __init__(self, settings: PipelineSettings | None = None, source: Path | str | None = None):
        self.settings = settings or load_settings()
        self.source = source
        self.status = STATUS_IDLE
        self.error: str | None = None
        self.last_updated: datetime | None = None
        self._snapshot: MarketDataSnapshot | None = None
        self._task: asyncio.Task | None = None
        self._task_source: Path | str | None = None

    @property
    def snapshot(self) -> MarketDataSnapshot | None:
        return self._snapshot

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    @property
    def is_loading(self) -> bool:
        return self.status == STATUS_LOADING

    def _read(self, source: Path | str) -> tuple[str, str]:
        if _is_path(source):
            path = Path(source)
            return read_source_text(path), path.name
        return source, "text"

    def load_sync(self, source: Path | str | None = None) -> MarketDataSnapshot:
        """
        Build a snapshot from source and make it current.

        Raises:
            ValueError: If no source is given or configured.
            SchemaError: If the source lacks required columns.
        """
        source = source if source is not None else self.source
        if source is None:
            raise ValueError("No data source configured")

        self.status = STATUS_LOADING
        try:
            text, label = self._read(source)
            snapshot = build_market_snapshot(text, self.settings, data_source=label)
        except Exception as exc:
            self.status = STATUS_FAILED
            self.error = str(exc)
            logger.error(f"Failed to load market data: {exc}")
            raise

        self.source = source
        self._snapshot = snapshot
        self.error = None
        self.status = STATUS_READY
        self.last_updated = datetime.now(timezone.utc)

        report = snapshot.quality_report
        if report.errors:
            logger.warning(
                f"Loaded with partial data: {report.valid_rows}/{report.total_rows} valid rows"
            )
        return snapshot

    async def load(self, source: Path | str | None = None, *, force: bool = False) -> MarketDataSnapshot:
        """
        Load asynchronously, reusing the current snapshot unless force is set.

        Concurrent callers for the same source await the same in-flight load.
        A caller asking for another source, or forcing a reload, waits for
        the running load to settle and then starts its own.
        """
        requested = source if source is not None else self.source

        while self._task is not None and not self._task.done():
            if not force and requested == self._task_source:
                return await asyncio.shield(self._task)
            # The task's outcome belongs to its own caller
            await asyncio.wait([self._task])

        if self._snapshot is not None and not force and requested == self.source:
            return self._snapshot

        self._task_source = requested
        self._task = asyncio.ensure_future(asyncio.to_thread(self.load_sync, requested))
        try:
            return await asyncio.shield(self._task)
        finally:
            if self._task is not None and self._task.done():
                self._task = None

    async def refresh(self) -> MarketDataSnapshot:
        """Reload the current source."""
        return await self.load(force=True)
