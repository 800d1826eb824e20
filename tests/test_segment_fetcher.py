import io

import pytest
from rich.console import Console

from conftest import MANIFEST_URL, FakeChannel, TimingOutChannel, segment_url
from echo360_dl.cli.progress_manager import ProgressManager
from echo360_dl.core.segment_fetcher import SegmentFetcher
from echo360_dl.exceptions import SegmentFetchError, SegmentWriteError
from echo360_dl.models.media import SelectedStream


async def test_fetch_writes_segment_named_by_ordinal(echo_channel, tmp_path):
    stream = SelectedStream(1, 3, "s1q3.m3u8")

    segment = await SegmentFetcher(echo_channel).fetch(stream, MANIFEST_URL, 1, tmp_path)

    assert segment.path == tmp_path / "01-s1q3.m4s"
    assert segment.path.read_bytes() == b"video-high"
    assert (segment.track_index, segment.ordinal, segment.size) == (1, 1, 10)
    assert echo_channel.requests == [segment_url("s1q3.m4s")]


async def test_progress_bar_follows_the_download(echo_channel, tmp_path):
    stream = SelectedStream(1, 3, "s1q3.m3u8")

    async with ProgressManager(Console(file=io.StringIO())) as progress:
        await SegmentFetcher(echo_channel, progress).fetch(stream, MANIFEST_URL, 1, tmp_path)

    assert progress.get_statistics() == {
        "streams_started": 1,
        "streams_finished": 1,
        "peak_bytes": 10,
    }
    assert progress.progress.tasks == []


async def test_same_segment_name_on_two_ordinals_does_not_collide(tmp_path):
    url = segment_url("s1q1.m4s")
    channel = FakeChannel(blobs={url: b"x" * 1000})
    fetcher = SegmentFetcher(channel)
    fetcher.CHUNK_SIZE = 64
    stream = SelectedStream(1, 1, "s1q1.m3u8")

    first = await fetcher.fetch(stream, MANIFEST_URL, 1, tmp_path)
    second = await fetcher.fetch(stream, MANIFEST_URL, 2, tmp_path)

    assert first.path != second.path
    assert first.path.stat().st_size == second.path.stat().st_size == 1000


async def test_download_failure_raises_segment_fetch_error(tmp_path):
    stream = SelectedStream(2, 5, "s2q5.m3u8")

    with pytest.raises(SegmentFetchError):
        await SegmentFetcher(FakeChannel()).fetch(stream, MANIFEST_URL, 1, tmp_path)


async def test_timed_out_download_names_the_timeout(tmp_path):
    stream = SelectedStream(1, 3, "s1q3.m3u8")

    with pytest.raises(SegmentFetchError) as exc_info:
        await SegmentFetcher(TimingOutChannel()).fetch(stream, MANIFEST_URL, 1, tmp_path)

    assert str(exc_info.value) == "Could not download s1q3.m4s: TimeoutError"


async def test_unwritable_destination_raises_segment_write_error(echo_channel, tmp_path):
    stream = SelectedStream(2, 5, "s2q5.m3u8")

    with pytest.raises(SegmentWriteError):
        await SegmentFetcher(echo_channel).fetch(
            stream, MANIFEST_URL, 1, tmp_path / "missing-dir"
        )


def test_segment_url_requires_a_recognised_manifest_url():
    stream = SelectedStream(1, 1, "s1q1.m3u8")

    with pytest.raises(SegmentFetchError):
        SegmentFetcher.segment_url(stream, "https://cdn.echo360.org/index.html")
