"""
Core application engine for orchestrating the download process.

The `PipelineOrchestrator` walks the batch and hands every video to the
`ManifestResolver`, `VariantSelector`, `SegmentFetcher` and `StreamAssembler`
in turn.
"""

from .manifest_resolver import ManifestResolver
from .pipeline import PipelineOrchestrator
from .segment_fetcher import SegmentFetcher
from .stream_assembler import FFmpegMuxer, StreamAssembler
from .variant_selector import VariantSelector

__all__ = [
    "FFmpegMuxer",
    "ManifestResolver",
    "PipelineOrchestrator",
    "SegmentFetcher",
    "StreamAssembler",
    "VariantSelector",
]
