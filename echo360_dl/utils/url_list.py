"""
Reads and validates the list of source URLs to download.
"""

import logging
from pathlib import Path
from typing import Iterable

from echo360_dl.exceptions import ConfigurationError
from echo360_dl.utils.urls import parse_source_url

log = logging.getLogger(__name__)

URL_FORMAT_HINT = "https://echo360<TLD>/media/<ID>/public"


def filter_source_urls(lines: Iterable[str]) -> list[str]:
    """
    Trims lines, drops blanks, comments and anything that is not an Echo360
    public media URL, and removes duplicates while keeping the original order.

    Raises:
        ConfigurationError: If no valid URL remains.
    """
    valid = []
    for line in lines:
        url = line.strip()
        if not url or url.startswith("#"):
            continue
        if parse_source_url(url) is None:
            log.debug(f"Ignoring invalid URL: {url}")
            continue
        valid.append(url)

    unique = list(dict.fromkeys(valid))
    if len(unique) < len(valid):
        log.info(f"Removed {len(valid) - len(unique)} duplicate URLs.")

    if not unique:
        raise ConfigurationError(
            "No valid URLs were found. "
            f"URLs must be in the format: {URL_FORMAT_HINT}."
        )
    return unique


def read_url_file(path: Path) -> list[str]:
    """Reads a newline-separated URL file and returns its valid URLs."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = f.read().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Could not read URL file '{path}': {e}") from e
    log.info(f"Reading URLs from file: [dim]{path}[/dim]")
    return filter_source_urls(lines)
