"""
Finds manifest URLs in the player data that Echo360 embeds in a public media page.

The page boots its player with ``Echo["mediaPlayerApp"]("<escaped JSON>");``;
the JSON lists one source per video under ``sources.video1``, ``sources.video2``...
"""

import asyncio
import json
import logging
import re

import aiohttp
from bs4 import BeautifulSoup

from echo360_dl.api.channel import AuthenticatedChannel
from echo360_dl.exceptions import DiscoveryError
from echo360_dl.models.media import DiscoveredSource
from echo360_dl.utils.path import clean_title

log = logging.getLogger(__name__)

_START_MARKER = 'Echo["mediaPlayerApp"]("'
_END_MARKER = '");'
_VIDEO_KEY_REGEX = re.compile(r"^video(?P<number>\d+)$")


def extract_between(source: str, start_marker: str, end_marker: str) -> str:
    """Returns the text between two markers."""
    start = source.find(start_marker)
    if start < 0:
        raise DiscoveryError("Failed to find the start of the player data.")
    start += len(start_marker)

    end = source.find(end_marker, start)
    if end < 0:
        raise DiscoveryError("Failed to find the end of the player data.")
    return source[start:end]


def parse_player_data(page_html: str) -> dict:
    """Decodes the player JSON embedded in a media page."""
    raw = extract_between(page_html, _START_MARKER, _END_MARKER)
    try:
        return json.loads(raw.replace("\\", ""))
    except json.JSONDecodeError as e:
        raise DiscoveryError(f"Player data is not valid JSON: {e}") from e


def manifest_uris_from(data: dict) -> list[str]:
    """Collects ``sources.video<N>.source`` in ascending ``N``."""
    sources = data.get("sources") or {}
    numbered = []
    for key, value in sources.items():
        match = _VIDEO_KEY_REGEX.match(key)
        if match and isinstance(value, dict) and value.get("source"):
            numbered.append((int(match.group("number")), value["source"]))
    return [uri for _, uri in sorted(numbered)]


class EmbeddedSourceDiscoverer:
    """Discovers videos by reading the page markup over the authenticated channel."""

    def __init__(self, channel: AuthenticatedChannel):
        self.channel = channel

    async def discover(self, url: str) -> DiscoveredSource:
        log.info("Loading the page...")
        try:
            page_html = await self.channel.get_text(url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DiscoveryError(
                f"Could not load {url}: {str(e) or type(e).__name__}"
            ) from e

        manifest_uris = manifest_uris_from(parse_player_data(page_html))
        if not manifest_uris:
            raise DiscoveryError("The player data lists no video sources.")

        soup = BeautifulSoup(page_html, "html.parser")
        page_title = soup.title.get_text() if soup.title else ""
        log.debug(f"Found {len(manifest_uris)} video sources in the page data.")
        return DiscoveredSource(
            url=url, title=clean_title(page_title), manifest_uris=tuple(manifest_uris)
        )
