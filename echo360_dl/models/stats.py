"""
Tracks the outcome of a download run for the final summary and exit code.
"""

import time
from dataclasses import dataclass, field


@dataclass
class JobFailure:
    """A failed source or video, with the stage that failed."""

    label: str
    stage: str
    message: str


@dataclass
class RunSummary:
    """Counters for a batch run."""

    sources_total: int = 0
    sources_processed: int = 0
    videos_downloaded: int = 0
    videos_skipped_exists: int = 0
    videos_failed: int = 0
    bytes_downloaded: int = 0
    aborted: bool = False
    failures: list[JobFailure] = field(default_factory=list)
    outputs: list[str] = field(default_factory=list)
    _start_time: float = field(default_factory=time.monotonic, repr=False)

    def record_failure(self, label: str, stage: str, message: str) -> None:
        self.failures.append(JobFailure(label, stage, message))

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self._start_time

    @property
    def succeeded(self) -> bool:
        """True when nothing failed and the batch ran to the end."""
        return not self.failures and not self.aborted
