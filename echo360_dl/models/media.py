"""
Data structures that flow through the download pipeline, from the parsed
manifest down to the per-track files handed to the muxer.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Variant:
    """One encoding of one track, as listed in the manifest."""

    track_index: int
    quality: int
    uri: str


@dataclass(frozen=True)
class Manifest:
    """A parsed manifest: the URL it came from and its variants in listed order."""

    base_uri: str
    variants: tuple[Variant, ...] = ()

    @property
    def track_indices(self) -> list[int]:
        """Distinct track indices in order of first appearance."""
        return list(dict.fromkeys(v.track_index for v in self.variants))


@dataclass(frozen=True)
class SelectedStream:
    """The variant chosen for a single track."""

    track_index: int
    quality: int
    uri: str

    @classmethod
    def from_variant(cls, variant: Variant) -> "SelectedStream":
        return cls(variant.track_index, variant.quality, variant.uri)


@dataclass(frozen=True)
class SegmentFile:
    """Raw bytes of one selected stream, saved to a temporary path."""

    path: Path
    track_index: int
    ordinal: int
    size: int = 0


@dataclass(frozen=True)
class DiscoveredSource:
    """What a discoverer found on a source page."""

    url: str
    title: str
    manifest_uris: tuple[str, ...]


@dataclass(frozen=True)
class VideoJob:
    """A single manifest to download, with the naming context of its source."""

    title: str
    manifest_uri: str
    sequence_number: int = 1
    is_part_of_multiple: bool = False

    @classmethod
    def from_source(cls, source: DiscoveredSource) -> list["VideoJob"]:
        """Builds one job per manifest; numbering is local to the source."""
        multiple = len(source.manifest_uris) > 1
        return [
            cls(
                title=source.title,
                manifest_uri=uri,
                sequence_number=number,
                is_part_of_multiple=multiple,
            )
            for number, uri in enumerate(source.manifest_uris, 1)
        ]


@dataclass
class BatchJob:
    """The ordered list of source page URLs for one run."""

    source_urls: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.source_urls)

    def __iter__(self):
        return iter(self.source_urls)
