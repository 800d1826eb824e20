"""
Finds manifest URLs by loading a media page in a headless Firefox and
watching the requests the player makes.
"""

import asyncio
import logging
from typing import Optional

from playwright.async_api import Browser, BrowserContext, Page, Response
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Playwright, async_playwright

from echo360_dl.api.channel import AuthenticatedChannel
from echo360_dl.exceptions import DiscoveryError
from echo360_dl.models.media import DiscoveredSource
from echo360_dl.utils.path import clean_title
from echo360_dl.utils.urls import is_manifest_url

log = logging.getLogger(__name__)


async def collect_until_quiet(
    queue: "asyncio.Queue[str]", first_timeout: float, quiet_period: float
) -> list[str]:
    """
    Drains URLs from ``queue``: waits up to ``first_timeout`` for the first
    one, then keeps reading until nothing new arrives for ``quiet_period``.
    Duplicates are dropped, first-seen order is kept.
    """
    seen: dict[str, None] = {}
    timeout = first_timeout
    while True:
        try:
            url = await asyncio.wait_for(queue.get(), timeout)
        except asyncio.TimeoutError:
            break
        seen.setdefault(url, None)
        timeout = quiet_period
    return list(seen)


class NetworkSourceDiscoverer:
    """
    Loads each source page in one browser page and records manifest responses.

    Responses are pushed into a queue owned by the current ``discover`` call,
    so nothing outside that call can see or mutate them. Cookies set by the
    page are copied into the authenticated channel afterwards.
    """

    def __init__(
        self,
        channel: AuthenticatedChannel,
        discovery_timeout: float = 30.0,
        quiet_period: float = 3.0,
        headless: bool = True,
    ):
        self.channel = channel
        self.discovery_timeout = discovery_timeout
        self.quiet_period = quiet_period
        self.headless = headless

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    async def __aenter__(self) -> "NetworkSourceDiscoverer":
        log.info("Initializing the browser...")
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.firefox.launch(headless=self.headless)
            self._context = await self._browser.new_context()
            self._page = await self._context.new_page()
        except PlaywrightError as e:
            await self.close()
            raise DiscoveryError(
                f"Could not start Firefox: {e}. Run 'playwright install firefox'."
            ) from e
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    async def discover(self, url: str) -> DiscoveredSource:
        if self._page is None or self._context is None:
            raise DiscoveryError("The browser has not been started.")

        queue: asyncio.Queue[str] = asyncio.Queue()

        def on_response(response: Response) -> None:
            if is_manifest_url(response.url):
                queue.put_nowait(response.url)

        self._page.on("response", on_response)
        try:
            log.info("Loading the page...")
            try:
                await self._page.goto(url, timeout=self.discovery_timeout * 1000)
            except PlaywrightError as e:
                raise DiscoveryError(f"Could not load {url}: {e}") from e

            log.info("Waiting for manifest responses...")
            manifest_uris = await collect_until_quiet(
                queue, self.discovery_timeout, self.quiet_period
            )
            page_title = await self._page.title()
        finally:
            self._page.remove_listener("response", on_response)

        if not manifest_uris:
            raise DiscoveryError(
                f"No manifest was requested within {self.discovery_timeout:.0f} seconds. "
                "The page may require signing in."
            )

        self.channel.add_cookies(await self._context.cookies())
        log.debug(f"Observed {len(manifest_uris)} manifest requests.")
        return DiscoveredSource(
            url=url, title=clean_title(page_title), manifest_uris=tuple(manifest_uris)
        )
