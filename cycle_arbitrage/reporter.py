"""
Periodic scan heartbeat.

Runs beside a scan as its own asyncio task and logs progress from
``ScanProgress`` snapshots. It only ever reads snapshots, never the scanner's
live counters.
"""

import asyncio
from typing import Callable, List, Optional

from .config_schema import ReporterSettings
from .execution_types import ScanProgress
from .utils import get_logger

logger = get_logger(__name__)


def format_heartbeat(
    progress: ScanProgress, breakdown_per_base: bool = True, breakdown_top: int = 4
) -> List[str]:
    """
    Render heartbeat lines for one snapshot.

    Returns no lines when no scan has started yet.
    """
    if progress.started_at is None:
        return []

    lines = [
        f"[HB] scan={progress.elapsed_ms / 1000:.2f}s | "
        f"progress={progress.quotes_requested:,} / {progress.total_quotes_planned:,} quotes "
        f"({progress.percent_complete:.1f}%) | pairsTried={progress.pairs_tried:,}"
    ]

    if breakdown_per_base and progress.per_base_counts:
        entries = sorted(progress.per_base_counts.items(), key=lambda kv: kv[1], reverse=True)
        top = " | ".join(f"{base}={count:,}" for base, count in entries[: max(1, breakdown_top)])
        lines.append(f"      bases: {top}")

    return lines


class ProgressReporter:
    """Logs a heartbeat every ``interval_ms`` while started."""

    def __init__(self, snapshot_fn: Callable[[], ScanProgress], settings: ReporterSettings):
        self.snapshot_fn = snapshot_fn
        self.settings = settings
        self._task: Optional[asyncio.Task] = None
        self._stopped = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def report(self) -> List[str]:
        """Log one heartbeat now and return the lines logged."""
        lines = format_heartbeat(
            self.snapshot_fn(),
            breakdown_per_base=self.settings.breakdown_per_base,
            breakdown_top=self.settings.breakdown_top,
        )
        for line in lines:
            logger.info(line)
        return lines

    def start(self) -> None:
        if not self.settings.enabled or self.running:
            return
        self._stopped.clear()
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stopped.set()
        await self._task
        self._task = None

    async def _loop(self) -> None:
        interval = self.settings.interval_ms / 1000
        while not self._stopped.is_set():
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=interval)
            except asyncio.TimeoutError:
                try:
                    self.report()
                except Exception:
                    logger.exception("Heartbeat report failed")
