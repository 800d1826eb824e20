"""
The cookie-bearing HTTP channel shared by manifest and segment retrieval.
"""

import http.cookiejar
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Iterable, Optional

import aiohttp
from yarl import URL

log = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0"
)


class AuthenticatedChannel:
    """
    Async HTTP client carrying the cookies of an authenticated Echo360 session.

    The session is created lazily and reused for every request in a run, so the
    manifest and its segments are always fetched with the same cookies.
    """

    def __init__(
        self,
        connect_timeout: float = 15.0,
        read_timeout: float = 90.0,
        cookies_file: Optional[str] = None,
    ):
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.cookie_jar = aiohttp.CookieJar()
        self._session: Optional[aiohttp.ClientSession] = None

        if cookies_file:
            self.load_cookies_file(Path(cookies_file))

    async def _initialize_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=4,
                limit_per_host=2,
                ttl_dns_cache=300,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                cookie_jar=self.cookie_jar,
                headers={"User-Agent": USER_AGENT},
                timeout=aiohttp.ClientTimeout(
                    total=None,
                    sock_connect=self.connect_timeout,
                    sock_read=self.read_timeout,
                ),
            )
            log.debug("Created HTTP session for the authenticated channel.")
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            log.debug("Authenticated channel closed.")

    async def __aenter__(self) -> "AuthenticatedChannel":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def load_cookies_file(self, path: Path) -> int:
        """
        Loads a Netscape-format cookies.txt (as exported by browser extensions)
        into the channel's cookie jar.

        Returns:
            The number of cookies loaded.
        """
        jar = http.cookiejar.MozillaCookieJar(str(path))
        try:
            jar.load(ignore_discard=True, ignore_expires=True)
        except (OSError, http.cookiejar.LoadError) as e:
            log.warning(f"[yellow]Could not load cookies from '{path}':[/] {e}")
            return 0
        return self.add_cookies(
            {"name": c.name, "value": c.value or "", "domain": c.domain, "path": c.path}
            for c in jar
        )

    def add_cookies(self, cookies: Iterable[dict[str, Any]]) -> int:
        """
        Adds browser-style cookie records (name/value/domain/path) to the jar.
        """
        count = 0
        for cookie in cookies:
            domain = cookie.get("domain", "").lstrip(".")
            if not domain:
                continue
            path = cookie.get("path") or "/"
            self.cookie_jar.update_cookies(
                {cookie["name"]: cookie.get("value", "")},
                response_url=URL(f"https://{domain}{path}"),
            )
            count += 1
        log.debug(f"Added {count} cookies to the authenticated channel.")
        return count

    async def get_text(self, url: str) -> str:
        """GETs a URL and returns its body decoded as text."""
        session = await self._initialize_session()
        async with session.get(url, allow_redirects=True) as response:
            response.raise_for_status()
            return await response.text()

    @asynccontextmanager
    async def stream(self, url: str) -> AsyncIterator[aiohttp.ClientResponse]:
        """
        GETs a URL for streaming; the body is read from ``response.content``.
        """
        session = await self._initialize_session()
        async with session.get(url, allow_redirects=True) as response:
            response.raise_for_status()
            yield response
