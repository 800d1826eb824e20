import pytest

from echo360_dl.utils.urls import (
    SegmentUrlBuilder,
    is_manifest_url,
    parse_source_url,
    parse_variant_name,
    segment_name_for,
)

MEDIA_ID = "1a2b3c4d-0000-1111-2222-333344445555"


def test_segment_url_replaces_only_the_manifest_file_name():
    url = SegmentUrlBuilder(
        "https://content.echo360.org/0000.x/s1_av/1/s1_av.m3u8"
    ).build("s1q3.m4s")

    assert url == "https://content.echo360.org/0000.x/s1_av/1/s1q3.m4s"


def test_segment_url_keeps_the_signed_query_string():
    manifest = "https://cdn.echo360.ca/a/b/s2_av.m3u8?Policy=a%2Fb&Signature=x~y"

    url = SegmentUrlBuilder(manifest).build("s2q1.m4s")

    assert url == "https://cdn.echo360.ca/a/b/s2q1.m4s?Policy=a%2Fb&Signature=x~y"


def test_builder_rejects_a_manifest_url_with_another_file_name():
    with pytest.raises(ValueError):
        SegmentUrlBuilder("https://cdn.echo360.org/a/playlist.m3u8")


def test_builder_rejects_names_with_directories():
    builder = SegmentUrlBuilder("https://cdn.echo360.org/a/s1_av.m3u8")

    with pytest.raises(ValueError):
        builder.build("../s1q1.m4s")


def test_segment_name_maps_playlist_extension():
    assert segment_name_for("s1q3.m3u8") == "s1q3.m4s"
    assert segment_name_for("sub/s2q0.M3U8?x=1") == "s2q0.m4s"


def test_segment_name_rejects_unknown_extension():
    with pytest.raises(ValueError):
        segment_name_for("s1q3.mpd")


def test_parse_variant_name():
    assert parse_variant_name("s1q3.m3u8") == (1, 3, "m3u8")
    assert parse_variant_name("https://x/y/s10q0.m3u8?a=b") == (10, 0, "m3u8")
    assert parse_variant_name("s1_av.m3u8") is None
    assert parse_variant_name("sxq1.m3u8") is None


@pytest.mark.parametrize(
    "url",
    [
        f"https://echo360.org/media/{MEDIA_ID}/public",
        f"https://echo360.org.au/media/{MEDIA_ID}/public",
        f"https://echo360.ca/media/{MEDIA_ID}/public",
    ],
)
def test_source_url_accepts_public_media_pages(url):
    assert parse_source_url(url) == MEDIA_ID


@pytest.mark.parametrize(
    "url",
    [
        f"http://echo360.org/media/{MEDIA_ID}/public",
        f"https://echo360.org/media/{MEDIA_ID}",
        "https://echo360.org/media/not-a-uuid/public",
        f"https://example.com/media/{MEDIA_ID}/public",
    ],
)
def test_source_url_rejects_other_urls(url):
    assert parse_source_url(url) is None


def test_manifest_url_detection():
    assert is_manifest_url("https://c.echo360.org/x/s1_av.m3u8?Policy=1")
    assert is_manifest_url("https://c.echo360.org/x/s2_a.m3u")
    assert not is_manifest_url("https://c.echo360.org/x/s1q3.m3u8")
    assert not is_manifest_url("https://c.echo360.org/x/s1q3.m4s")
