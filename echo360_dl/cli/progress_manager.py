"""
Manages the Rich progress display for stream downloads.

Streams are fetched one at a time, so the display shows at most one byte
progress bar; log lines printed through the same console stay above it.
"""

import logging

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

log = logging.getLogger("echo360_dl")


class ProgressManager:
    """Wraps a Rich ``Progress`` with per-stream tasks and simple counters."""

    def __init__(self, console: Console):
        self.console = console

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            BarColumn(bar_width=30),
            "[progress.percentage]{task.percentage:>3.0f}%",
            "•",
            DownloadColumn(),
            "•",
            TransferSpeedColumn(),
            "•",
            TimeRemainingColumn(),
            console=console,
            transient=True,
        )
        self._stats = {"streams_started": 0, "streams_finished": 0, "peak_bytes": 0}
        self._started = False

    def add_stream_task(self, description: str, total_size: int | None) -> TaskID:
        """Adds a bar for one stream; an unknown size shows a pulsing bar."""
        self._stats["streams_started"] += 1
        if len(description) > 50:
            description = description[:47] + "..."
        return self.progress.add_task(description, total=total_size, start=True)

    def update_task_progress(self, task_id: TaskID | None, completed: int):
        if task_id is not None:
            self.progress.update(task_id, completed=completed)
            self._stats["peak_bytes"] = max(self._stats["peak_bytes"], completed)

    def remove_task(self, task_id: TaskID | None):
        if task_id is None:
            return
        try:
            self.progress.remove_task(task_id)
            self._stats["streams_finished"] += 1
        except KeyError:
            log.debug(f"Progress task {task_id} was already removed.")

    def get_statistics(self) -> dict:
        return self._stats.copy()

    async def __aenter__(self) -> "ProgressManager":
        self.progress.start()
        self._started = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._started:
            self.progress.stop()
            self._started = False
