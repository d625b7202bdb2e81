"""
Manages a Rich progress display for concurrent track downloads: one bar per
active transfer plus an overall bar for the session.
"""

import asyncio
import logging
from typing import Callable

from rich.console import Console, Group
from rich.live import Live
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

log = logging.getLogger("soundcloud_cli")


class ProgressManager:
    """
    Tracks per-track fractional progress and session totals.

    Track bars run from 0 to 100; the downloader's progress sink reports
    fractions in [0.0, 1.0] which are scaled onto them.
    """

    def __init__(self, console: Console, quiet: bool = False):
        self.console = console
        self.quiet = quiet

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            BarColumn(bar_width=30),
            "[progress.percentage]{task.percentage:>3.0f}%",
            "•",
            TimeElapsedColumn(),
            console=console,
            transient=True,
        )
        self.overall_progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            TextColumn("{task.completed}/{task.total}"),
            console=console,
        )

        self._live: Live | None = None
        self._overall_task_id: TaskID | None = None
        self._stats = {
            "total_tracks": 0,
            "completed": 0,
            "failed": 0,
            "skipped": 0,
            "cancelled": 0,
            "active_downloads": 0,
            "peak_concurrent": 0,
        }

    def log_message(self, message: str, level: str = "info"):
        getattr(log, level, log.info)(message)

    def _refresh_overall(self) -> None:
        if self._overall_task_id is None:
            return
        self.overall_progress.update(
            self._overall_task_id,
            total=self._stats["total_tracks"],
            completed=(
                self._stats["completed"]
                + self._stats["failed"]
                + self._stats["skipped"]
                + self._stats["cancelled"]
            ),
        )

    def add_to_total(self, count: int):
        self._stats["total_tracks"] += count
        self._refresh_overall()

    def add_track_task(self, description: str) -> TaskID:
        task_id = self.progress.add_task(description, total=100)
        self._stats["active_downloads"] += 1
        self._stats["peak_concurrent"] = max(
            self._stats["peak_concurrent"], self._stats["active_downloads"]
        )
        return task_id

    def progress_sink(self, task_id: TaskID) -> Callable[[float], None]:
        """Returns a callback that moves ``task_id``'s bar to a fraction in [0, 1]."""

        def report(fraction: float) -> None:
            self.progress.update(task_id, completed=fraction * 100)

        return report

    def remove_task(self, task_id: TaskID, success: bool = True):
        try:
            self.progress.remove_task(task_id)
        except KeyError:
            return
        self._stats["active_downloads"] -= 1
        self._stats["completed" if success else "failed"] += 1
        self._refresh_overall()

    def cancel_task(self, task_id: TaskID):
        """Removes a transfer stopped by cancellation without counting it as failed."""
        try:
            self.progress.remove_task(task_id)
        except KeyError:
            return
        self._stats["active_downloads"] -= 1
        self.increment_cancelled()

    def increment_cancelled(self, count: int = 1):
        self._stats["cancelled"] += count
        self._refresh_overall()

    def increment_skipped(self, count: int = 1):
        self._stats["skipped"] += count
        self._refresh_overall()

    def increment_failed(self, count: int = 1):
        self._stats["failed"] += count
        self._refresh_overall()

    def get_statistics(self) -> dict:
        return self._stats.copy()

    async def __aenter__(self):
        if self.quiet:
            return self
        self._overall_task_id = self.overall_progress.add_task("Overall", total=0)
        self._live = Live(
            Group(self.overall_progress, self.progress),
            console=self.console,
            refresh_per_second=10,
        )
        self._live.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._live:
            await asyncio.sleep(0.1)
            self._live.stop()
