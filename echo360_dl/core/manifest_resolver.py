"""
Fetches an HLS master manifest and turns it into a list of variants.
"""

import asyncio
import logging

import aiohttp
import m3u8

from echo360_dl.api.channel import AuthenticatedChannel
from echo360_dl.exceptions import ManifestFetchError, ManifestParseError
from echo360_dl.models.media import Manifest, Variant
from echo360_dl.utils.urls import parse_variant_name

log = logging.getLogger(__name__)

MANIFEST_MARKER = "#EXTM3U"


class ManifestResolver:
    """Resolves a manifest URL into a :class:`Manifest`. No retries."""

    def __init__(self, channel: AuthenticatedChannel):
        self.channel = channel

    async def resolve(self, manifest_uri: str) -> Manifest:
        """
        Downloads and parses the manifest at ``manifest_uri``.

        Raises:
            ManifestFetchError: If the document cannot be retrieved.
            ManifestParseError: If it is not a playlist or a variant name is malformed.
        """
        try:
            document = await self.channel.get_text(manifest_uri)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ManifestFetchError(
                f"Could not retrieve manifest {manifest_uri}: {str(e) or type(e).__name__}"
            ) from e

        manifest = self.parse(document, manifest_uri)
        log.debug(
            f"Manifest lists {len(manifest.variants)} variants across "
            f"{len(manifest.track_indices)} tracks."
        )
        return manifest

    @staticmethod
    def parse(document: str, manifest_uri: str) -> Manifest:
        """Parses a manifest document already in memory."""
        if not document.lstrip().startswith(MANIFEST_MARKER):
            raise ManifestParseError(
                f"Expected '{MANIFEST_MARKER}' at the start of the manifest."
            )

        try:
            playlist = m3u8.loads(document, uri=manifest_uri)
        except Exception as e:
            raise ManifestParseError(f"Manifest could not be parsed: {e}") from e

        variants = []
        for entry in playlist.playlists:
            decoded = parse_variant_name(entry.uri or "")
            if decoded is None:
                raise ManifestParseError(
                    f"Variant '{entry.uri}' does not match the "
                    "s<track>q<quality>.<ext> naming scheme."
                )
            track_index, quality, _ = decoded
            variants.append(Variant(track_index, quality, entry.uri))

        return Manifest(base_uri=manifest_uri, variants=tuple(variants))
