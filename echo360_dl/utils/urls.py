"""
URL helpers: validating source page URLs and building segment URLs from a
manifest URL.

Echo360 keeps the top-level manifest (``s1_av.m3u8``), every per-variant
playlist (``s1q3.m3u8``) and the raw segment files (``s1q3.m4s``) in one
directory, so a segment URL is the manifest URL with its last path component
swapped for the segment filename.
"""

import re
from typing import Optional, Tuple
from urllib.parse import urlsplit, urlunsplit

SOURCE_URL_REGEX = re.compile(
    r"^https://echo360[^/]*/media/"
    r"(?P<id>[^/-]+-[^/-]+-[^/-]+-[^/-]+-[^/-]+)/public$"
)
MANIFEST_NAME_REGEX = re.compile(r"^s\d+_.*\.m3u8?$")
MANIFEST_URL_REGEX = re.compile(r"s\d+_[^/?#]*\.m3u8?(?:[?#].*)?$")
VARIANT_NAME_REGEX = re.compile(
    r"^s(?P<track>\d+)q(?P<quality>\d+)\.(?P<ext>[A-Za-z0-9]+)$"
)

# Manifest playlist suffix -> raw segment suffix
SEGMENT_EXTENSIONS = {"m3u8": "m4s", "m3u": "m4s"}


def parse_source_url(url: str) -> Optional[str]:
    """Returns the media ID of an Echo360 public media URL, or None."""
    match = SOURCE_URL_REGEX.match(url)
    return match.group("id") if match else None


def is_manifest_url(url: str) -> bool:
    """Tells whether a URL seen on the wire is a top-level stream manifest."""
    return bool(MANIFEST_URL_REGEX.search(url))


def parse_variant_name(uri: str) -> Optional[Tuple[int, int, str]]:
    """
    Decodes ``s<track>q<quality>.<ext>`` from the last path component of a
    variant URI. Returns (track_index, quality, ext) or None when it does not match.
    """
    name = urlsplit(uri).path.rsplit("/", 1)[-1]
    match = VARIANT_NAME_REGEX.match(name)
    if not match:
        return None
    return int(match.group("track")), int(match.group("quality")), match.group("ext")


def segment_name_for(variant_uri: str) -> str:
    """
    Maps a variant playlist name to its raw segment name, e.g.
    ``s1q3.m3u8`` -> ``s1q3.m4s``.

    Raises:
        ValueError: If the name is not a variant name or its extension is unknown.
    """
    parsed = parse_variant_name(variant_uri)
    if parsed is None:
        raise ValueError(f"'{variant_uri}' is not a s<track>q<quality> variant name.")
    track, quality, ext = parsed
    segment_ext = SEGMENT_EXTENSIONS.get(ext.lower())
    if segment_ext is None:
        raise ValueError(f"No raw segment extension is known for '.{ext}'.")
    return f"s{track}q{quality}.{segment_ext}"


class SegmentUrlBuilder:
    """
    Builds segment URLs that live next to a manifest.

    The manifest URL is split into path segments once; the last one must be a
    top-level manifest name (``s<n>_<anything>.m3u8``). Scheme, host, the
    directory part of the path and the query string (which carries signed
    access policies) are kept as-is.
    """

    def __init__(self, manifest_uri: str):
        parts = urlsplit(manifest_uri)
        directory, _, name = parts.path.rpartition("/")
        if not MANIFEST_NAME_REGEX.match(name):
            raise ValueError(
                f"Manifest URL does not end in a s<n>_*.m3u8 file name: {manifest_uri}"
            )
        self.manifest_uri = manifest_uri
        self.manifest_name = name
        self._parts = parts
        self._directory = directory

    def build(self, segment_name: str) -> str:
        """Returns the URL of ``segment_name`` in the manifest's directory."""
        if not segment_name or "/" in segment_name:
            raise ValueError(f"Invalid segment file name: '{segment_name}'")
        path = f"{self._directory}/{segment_name}"
        return urlunsplit(self._parts._replace(path=path))
