"""
Downloads the raw segment file behind a selected stream.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import aiofiles
import aiohttp

from echo360_dl.api.channel import AuthenticatedChannel
from echo360_dl.cli.progress_manager import ProgressManager
from echo360_dl.exceptions import SegmentFetchError, SegmentWriteError
from echo360_dl.models.media import SegmentFile, SelectedStream
from echo360_dl.utils.urls import SegmentUrlBuilder, segment_name_for

log = logging.getLogger(__name__)


class SegmentFetcher:
    """
    Fetches one selected stream into a file inside a job's working directory.

    Each Echo360 variant is a single fragmented-MP4 file next to the manifest,
    so one GET per stream is enough. Files are named ``<ordinal>-<segment>``
    so two tracks can never collide within a job.
    """

    CHUNK_SIZE = 262144  # 256 KB

    def __init__(
        self,
        channel: AuthenticatedChannel,
        progress_manager: Optional[ProgressManager] = None,
    ):
        self.channel = channel
        self.progress_manager = progress_manager

    @staticmethod
    def segment_url(stream: SelectedStream, manifest_uri: str) -> str:
        """Derives the URL of a stream's raw segment from the manifest URL."""
        try:
            return SegmentUrlBuilder(manifest_uri).build(segment_name_for(stream.uri))
        except ValueError as e:
            raise SegmentFetchError(str(e)) from e

    async def fetch(
        self,
        stream: SelectedStream,
        manifest_uri: str,
        ordinal: int,
        work_dir: Path,
    ) -> SegmentFile:
        """
        Downloads ``stream`` to ``work_dir``.

        Raises:
            SegmentFetchError: If the URL cannot be derived or the download fails.
            SegmentWriteError: If the data cannot be written to disk.
        """
        url = self.segment_url(stream, manifest_uri)
        segment_name = url.split("?", 1)[0].rsplit("/", 1)[-1]
        destination = work_dir / f"{ordinal:02d}-{segment_name}"
        log.debug(f"Fetching {url} -> {destination.name}")

        task_id = None
        bytes_written = 0
        try:
            async with self.channel.stream(url) as response:
                if self.progress_manager:
                    task_id = self.progress_manager.add_stream_task(
                        f"Stream {ordinal} ({segment_name})",
                        total_size=response.content_length,
                    )
                async with aiofiles.open(destination, "wb") as f:
                    async for chunk in response.content.iter_chunked(self.CHUNK_SIZE):
                        await f.write(chunk)
                        bytes_written += len(chunk)
                        if self.progress_manager:
                            self.progress_manager.update_task_progress(
                                task_id, completed=bytes_written
                            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SegmentFetchError(
                f"Could not download {segment_name}: {str(e) or type(e).__name__}"
            ) from e
        except OSError as e:
            raise SegmentWriteError(f"Could not write {destination}: {e}") from e
        finally:
            if self.progress_manager:
                self.progress_manager.remove_task(task_id)

        return SegmentFile(
            path=destination,
            track_index=stream.track_index,
            ordinal=ordinal,
            size=bytes_written,
        )
