"""
The main orchestrator: walks a batch of source pages, and for every video found
runs resolve -> select -> fetch -> assemble, one step at a time.
"""

import logging
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from rich.markup import escape

from echo360_dl.exceptions import Echo360Error
from echo360_dl.models.config import DownloadConfig
from echo360_dl.models.media import BatchJob, DiscoveredSource, VideoJob
from echo360_dl.models.stats import RunSummary
from echo360_dl.utils.path import create_dir, output_filename

from .manifest_resolver import ManifestResolver
from .segment_fetcher import SegmentFetcher
from .stream_assembler import StreamAssembler
from .variant_selector import VariantSelector

log = logging.getLogger(__name__)


class SourceDiscoverer(Protocol):
    """Finds the manifest URLs (and a title) behind a source page URL."""

    async def discover(self, url: str) -> DiscoveredSource: ...


class BatchAborted(Exception):
    """Internal signal used to stop the batch when fail_fast is set."""


class PipelineOrchestrator:
    """
    Runs a batch strictly sequentially: sources in order, videos of a source in
    order, and the streams of a video one after another.

    A failed video is logged and recorded in the summary and the batch moves
    on, unless ``fail_fast`` is configured, in which case the batch stops at
    the first failure.
    """

    def __init__(
        self,
        config: DownloadConfig,
        discoverer: SourceDiscoverer,
        resolver: ManifestResolver,
        selector: VariantSelector,
        fetcher: SegmentFetcher,
        assembler: StreamAssembler,
    ):
        self.config = config
        self.discoverer = discoverer
        self.resolver = resolver
        self.selector = selector
        self.fetcher = fetcher
        self.assembler = assembler
        self.output_dir = Path(config.output_dir)

    async def run(self, batch: BatchJob) -> RunSummary:
        """Processes every source URL of ``batch`` and returns the run summary."""
        summary = RunSummary(sources_total=len(batch))
        create_dir(self.output_dir)

        try:
            for index, url in enumerate(batch, 1):
                if index > 1:
                    log.info("")
                log.info(f"[bold]URL {index} of {len(batch)}:[/bold] {escape(url)}")
                await self._process_source(url, summary)
                summary.sources_processed += 1
        except BatchAborted:
            summary.aborted = True
            log.error("[red]Stopping the batch after the first failure (fail-fast).[/red]")

        return summary

    async def _process_source(self, url: str, summary: RunSummary) -> None:
        try:
            source = await self.discoverer.discover(url)
        except Echo360Error as e:
            self._handle_failure(url, e, summary)
            return

        jobs = VideoJob.from_source(source)
        for job in jobs:
            if job.sequence_number > 1:
                log.info("---")
            log.info(f"Downloading video {job.sequence_number} of {len(jobs)}...")
            label = output_filename(job, self.config.container_ext)
            try:
                await self.process_video(job, summary)
            except Echo360Error as e:
                summary.videos_failed += 1
                self._handle_failure(label, e, summary)

    def _handle_failure(self, label: str, error: Echo360Error, summary: RunSummary):
        summary.record_failure(label, error.stage, str(error))
        log.error(
            f"[red]✗ Failed ({error.stage}):[/] {escape(label)} ({escape(str(error))})",
            exc_info=log.getEffectiveLevel() == logging.DEBUG,
        )
        if self.config.fail_fast:
            raise BatchAborted() from error

    async def process_video(self, job: VideoJob, summary: RunSummary) -> Optional[Path]:
        """
        Runs one video through the pipeline and returns the output path, or
        None when the output already exists and overwriting is off.
        """
        output_path = self.output_dir / output_filename(job, self.config.container_ext)
        if output_path.is_file() and not self.config.overwrite:
            summary.videos_skipped_exists += 1
            log.info(
                f"[yellow]○ Skipping:[/] [dim]{escape(output_path.name)}[/dim] "
                "(already exists)"
            )
            return None

        manifest = await self.resolver.resolve(job.manifest_uri)
        streams = self.selector.select(manifest)

        with tempfile.TemporaryDirectory(
            prefix=".echo360-", dir=self.output_dir, ignore_cleanup_errors=True
        ) as work_dir:
            segment_files = []
            for ordinal, stream in enumerate(streams, 1):
                log.info(f"Downloading stream {ordinal} of {len(streams)}...")
                segment = await self.fetcher.fetch(
                    stream, job.manifest_uri, ordinal, Path(work_dir)
                )
                segment_files.append(segment)
                summary.bytes_downloaded += segment.size

            log.info("Merging...")
            await self.assembler.assemble(segment_files, output_path)

        summary.videos_downloaded += 1
        summary.outputs.append(str(output_path))
        log.info(f"[green]✓ Video downloaded:[/] {escape(output_path.name)}")
        return output_path
