"""
Stream-copies the downloaded per-track files into a single container with FFmpeg.
"""

import asyncio
import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from echo360_dl.exceptions import MuxingError
from echo360_dl.models.media import SegmentFile

log = logging.getLogger(__name__)


class FFmpegMuxer:
    """
    Runs ``ffmpeg`` as a black-box muxer: every input is mapped in order and
    all codecs are copied, nothing is re-encoded.
    """

    def __init__(self, ffmpeg_path: str = "", timeout: float = 600.0):
        self.ffmpeg_path = ffmpeg_path
        self.timeout = timeout

    def resolve_binary(self) -> str:
        """Finds the ffmpeg executable; an explicit path wins over PATH."""
        binary = self.ffmpeg_path or shutil.which("ffmpeg")
        if not binary:
            raise MuxingError(
                "FFmpeg not found. Please install FFmpeg and add it to your PATH, "
                "or set 'ffmpeg_path' in the configuration."
            )
        return binary

    def build_command(self, inputs: Sequence[Path], output_path: Path) -> list[str]:
        cmd = [self.resolve_binary(), "-y", "-hide_banner", "-loglevel", "error"]
        for path in inputs:
            cmd += ["-i", str(path)]
        for index in range(len(inputs)):
            cmd += ["-map", str(index)]
        # bitexact keeps the muxer from stamping version strings, so reruns match
        cmd += ["-c", "copy", "-fflags", "+bitexact", str(output_path)]
        return cmd

    async def mux(self, inputs: Sequence[Path], output_path: Path) -> None:
        """
        Runs ffmpeg and waits for it to exit, at most ``timeout`` seconds.

        Raises:
            MuxingError: If ffmpeg is missing, fails, or times out.
        """
        cmd = self.build_command(inputs, output_path)
        log.debug(f"Running: {subprocess.list2cmdline(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise MuxingError(f"Could not start FFmpeg: {e}") from e

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), self.timeout)
        except asyncio.TimeoutError as e:
            await self._kill(process)
            raise MuxingError(
                f"FFmpeg did not finish within {self.timeout:.0f} seconds."
            ) from e
        except asyncio.CancelledError:
            await self._kill(process)
            raise

        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="ignore").strip()
            raise MuxingError(
                f"FFmpeg exited with code {process.returncode}: {message or 'no output'}"
            )

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            process.kill()
            await process.wait()


class StreamAssembler:
    """Muxes a job's segment files into the output container, then removes them."""

    def __init__(self, muxer: FFmpegMuxer):
        self.muxer = muxer

    async def assemble(
        self, segment_files: Sequence[SegmentFile], output_path: Path
    ) -> None:
        """
        Produces ``output_path`` from ``segment_files`` in ordinal order.

        A partially written output is removed when muxing fails. Segment
        files are deleted only on success; a failed delete is logged.
        """
        if not segment_files:
            raise MuxingError("There are no streams to merge.")

        ordered = sorted(segment_files, key=lambda s: s.ordinal)
        try:
            await self.muxer.mux([s.path for s in ordered], output_path)
        except BaseException:
            self._remove_partial_output(output_path)
            raise

        if not output_path.is_file():
            raise MuxingError(f"FFmpeg reported success but {output_path} is missing.")

        for segment in ordered:
            try:
                os.remove(segment.path)
            except OSError as e:
                log.warning(
                    f"[yellow]Could not delete temporary file {segment.path}:[/] {e}"
                )

    @staticmethod
    def _remove_partial_output(output_path: Path) -> None:
        try:
            output_path.unlink(missing_ok=True)
        except OSError as e:
            log.warning(f"[yellow]Could not remove partial output {output_path}:[/] {e}")
