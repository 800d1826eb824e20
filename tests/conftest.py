"""Shared fakes: an in-memory channel, a muxer that concatenates, a discoverer."""

import asyncio
import re
from contextlib import asynccontextmanager
from pathlib import Path

import aiohttp
import pytest

from echo360_dl.exceptions import DiscoveryError, MuxingError
from echo360_dl.models.media import DiscoveredSource

MANIFEST_URL = (
    "https://content.echo360.org/0000.abcd/1234/1/s1_av.m3u8"
    "?Policy=eyJTdGF0ZW1lbnQiOltdfQ__&Signature=abc~def&Key-Pair-Id=K1"
)

MASTER_PLAYLIST = """#EXTM3U
#EXT-X-VERSION:3
#EXT-X-STREAM-INF:BANDWIDTH=400000
s1q1.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=1600000
s1q3.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=96000
s2q5.m3u8
"""


def segment_url(name: str, manifest_url: str = MANIFEST_URL) -> str:
    return re.sub(r"s\d+_av\.m3u8", name, manifest_url)


class FakeContent:
    def __init__(self, data: bytes):
        self._data = data

    async def iter_chunked(self, size: int):
        for start in range(0, len(self._data), size):
            yield self._data[start : start + size]


class FakeResponse:
    def __init__(self, data: bytes):
        self.content_length = len(data)
        self.content = FakeContent(data)


class FakeChannel:
    """Serves text and bytes from dictionaries; unknown URLs fail like a 404."""

    def __init__(self, texts: dict | None = None, blobs: dict | None = None):
        self.texts = texts or {}
        self.blobs = blobs or {}
        self.requests: list[str] = []

    async def get_text(self, url: str) -> str:
        self.requests.append(url)
        if url not in self.texts:
            raise aiohttp.ClientConnectionError(f"404 for {url}")
        return self.texts[url]

    @asynccontextmanager
    async def stream(self, url: str):
        self.requests.append(url)
        if url not in self.blobs:
            raise aiohttp.ClientConnectionError(f"404 for {url}")
        yield FakeResponse(self.blobs[url])


class TimingOutChannel:
    """Every request times out, the way a stalled socket read does."""

    async def get_text(self, url: str) -> str:
        raise asyncio.TimeoutError()

    @asynccontextmanager
    async def stream(self, url: str):
        raise asyncio.TimeoutError()
        yield


class FakeMuxer:
    """Writes the concatenated inputs to the output, recording each call."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[tuple[list[str], Path]] = []

    async def mux(self, inputs, output_path: Path) -> None:
        self.calls.append(([p.name for p in inputs], output_path))
        data = b"".join(Path(p).read_bytes() for p in inputs)
        output_path.write_bytes(data)
        if self.fail:
            raise MuxingError("ffmpeg exited with code 1")


class FakeDiscoverer:
    def __init__(self, sources: dict[str, DiscoveredSource]):
        self.sources = sources
        self.visited: list[str] = []

    async def discover(self, url: str) -> DiscoveredSource:
        self.visited.append(url)
        if url not in self.sources:
            raise DiscoveryError(f"No manifest was requested for {url}.")
        return self.sources[url]


@pytest.fixture
def echo_channel() -> FakeChannel:
    """A channel serving the three-variant manifest and its segments."""
    return FakeChannel(
        texts={MANIFEST_URL: MASTER_PLAYLIST},
        blobs={
            segment_url("s1q1.m4s"): b"video-low",
            segment_url("s1q3.m4s"): b"video-high",
            segment_url("s2q5.m4s"): b"audio",
        },
    )
