import sys

import pytest

from conftest import FakeMuxer
from echo360_dl.core import stream_assembler
from echo360_dl.core.stream_assembler import FFmpegMuxer, StreamAssembler
from echo360_dl.exceptions import MuxingError
from echo360_dl.models.media import SegmentFile


def make_segments(tmp_path, *contents):
    segments = []
    for ordinal, data in enumerate(contents, 1):
        path = tmp_path / f"{ordinal:02d}-s{ordinal}q1.m4s"
        path.write_bytes(data)
        segments.append(SegmentFile(path, track_index=ordinal, ordinal=ordinal))
    return segments


async def test_assemble_muxes_in_ordinal_order_and_deletes_segments(tmp_path):
    segments = make_segments(tmp_path, b"video", b"audio")
    muxer = FakeMuxer()
    output = tmp_path / "Lecture.mp4"

    await StreamAssembler(muxer).assemble(list(reversed(segments)), output)

    assert muxer.calls == [(["01-s1q1.m4s", "02-s2q1.m4s"], output)]
    assert output.read_bytes() == b"videoaudio"
    assert not any(s.path.exists() for s in segments)


async def test_failed_mux_keeps_segments_and_removes_partial_output(tmp_path):
    segments = make_segments(tmp_path, b"video", b"audio")
    output = tmp_path / "Lecture.mp4"

    with pytest.raises(MuxingError):
        await StreamAssembler(FakeMuxer(fail=True)).assemble(segments, output)

    assert not output.exists()
    assert all(s.path.exists() for s in segments)


async def test_delete_failure_is_not_fatal(tmp_path, monkeypatch, caplog):
    segments = make_segments(tmp_path, b"video")
    output = tmp_path / "Lecture.mp4"

    def refuse(path):
        raise PermissionError("locked")

    monkeypatch.setattr(stream_assembler.os, "remove", refuse)

    await StreamAssembler(FakeMuxer()).assemble(segments, output)

    assert output.exists()
    assert "Could not delete" in caplog.text


async def test_nothing_to_assemble_is_an_error(tmp_path):
    with pytest.raises(MuxingError):
        await StreamAssembler(FakeMuxer()).assemble([], tmp_path / "x.mp4")


def test_ffmpeg_command_maps_every_input_and_copies_codecs(tmp_path):
    muxer = FFmpegMuxer(ffmpeg_path="/opt/ffmpeg")
    inputs = [tmp_path / "01-s1q3.m4s", tmp_path / "02-s2q5.m4s"]
    output = tmp_path / "out.mp4"

    cmd = muxer.build_command(inputs, output)

    assert cmd == [
        "/opt/ffmpeg", "-y", "-hide_banner", "-loglevel", "error",
        "-i", str(inputs[0]), "-i", str(inputs[1]),
        "-map", "0", "-map", "1",
        "-c", "copy", "-fflags", "+bitexact", str(output),
    ]


def test_missing_ffmpeg_is_a_muxing_error(monkeypatch):
    monkeypatch.setattr(stream_assembler.shutil, "which", lambda name: None)

    with pytest.raises(MuxingError, match="FFmpeg not found"):
        FFmpegMuxer().resolve_binary()


async def test_nonzero_exit_is_a_muxing_error(tmp_path, monkeypatch):
    muxer = FFmpegMuxer()
    script = "import sys; sys.stderr.write('Invalid data found'); sys.exit(3)"
    monkeypatch.setattr(
        muxer, "build_command", lambda inputs, output: [sys.executable, "-c", script]
    )

    with pytest.raises(MuxingError, match="code 3: Invalid data found"):
        await muxer.mux([], tmp_path / "out.mp4")


async def test_mux_wait_is_bounded_by_the_timeout(tmp_path, monkeypatch):
    muxer = FFmpegMuxer(timeout=0.5)
    monkeypatch.setattr(
        muxer,
        "build_command",
        lambda inputs, output: [sys.executable, "-c", "import time; time.sleep(30)"],
    )

    with pytest.raises(MuxingError, match="did not finish"):
        await muxer.mux([], tmp_path / "out.mp4")
