"""
Discovery Layer.

This package finds the manifest URLs behind an Echo360 media page, either
from the player data embedded in the page or by watching a browser load it.
The browser-based discoverer lives in `echo360_dl.web.network` and is imported
on demand, since it pulls in Playwright.
"""

from .embedded import EmbeddedSourceDiscoverer

__all__ = ["EmbeddedSourceDiscoverer"]
