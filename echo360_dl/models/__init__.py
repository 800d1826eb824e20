"""
Data Models Layer.

This package contains the dataclasses passed between pipeline stages, the
Pydantic configuration model, and the run statistics.
"""

from .config import DownloadConfig
from .media import (
    BatchJob,
    DiscoveredSource,
    Manifest,
    SegmentFile,
    SelectedStream,
    Variant,
    VideoJob,
)
from .stats import JobFailure, RunSummary

__all__ = [
    "BatchJob",
    "DiscoveredSource",
    "DownloadConfig",
    "JobFailure",
    "Manifest",
    "RunSummary",
    "SegmentFile",
    "SelectedStream",
    "Variant",
    "VideoJob",
]
