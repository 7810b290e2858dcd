"""
HTTP access to provide/vod style aggregator APIs
"""
import asyncio
from typing import Optional
from urllib.parse import quote

import aiohttp

from ..config import settings
from ..errors import HttpStatusError, NetworkError, RemoteTimeoutError
from ..logging_config import setup_logging

logger = setup_logging(__name__)


def build_api_url(base: str, action: str, hours: Optional[int] = None) -> str:
    """
    Append the action (and optional changed-within window) to a source URL

    `http://x/api.php/provide/vod` -> `http://x/api.php/provide/vod?ac=detail&h=24`
    `http://x/api.php?foo=1` -> `http://x/api.php?foo=1&ac=detail`
    """
    if "?" not in base:
        url = f"{base}?ac={action}"
    elif base.endswith("?"):
        url = f"{base}ac={action}"
    else:
        url = f"{base}&ac={action}"

    if hours is not None:
        url = f"{url}&h={hours}"
    return url


def with_page(url: str, page: int) -> str:
    return f"{url}&pg={page}"


def build_query_url(
    base: str,
    page: Optional[int] = None,
    type_id: Optional[str] = None,
    wd: Optional[str] = None,
    action: str = "detail"
) -> str:
    """Listing URL used for browsing a remote catalog"""
    url = build_api_url(base, action)
    if page is not None:
        url = with_page(url, page)
    if type_id:
        url = f"{url}&t={type_id}"
    if wd:
        url = f"{url}&wd={quote(wd)}"
    return url


class RemoteFetchClient:
    """Thin aiohttp wrapper with per-request timeouts and typed errors"""

    def __init__(self, timeout: Optional[float] = None, user_agent: Optional[str] = None):
        self.timeout = timeout if timeout is not None else settings.FETCH_TIMEOUT
        self.user_agent = user_agent or settings.USER_AGENT
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                headers={
                    'User-Agent': self.user_agent,
                    'Accept': 'application/json,text/plain,*/*',
                },
            )
        return self.session

    async def _request(self, url: str, timeout: Optional[float]) -> bytes:
        client_timeout = aiohttp.ClientTimeout(total=timeout if timeout is not None else self.timeout)
        try:
            async with self._get_session().get(url, timeout=client_timeout) as response:
                if response.status >= 400:
                    raise HttpStatusError(url, response.status)
                return await response.read()
        except asyncio.TimeoutError as e:
            raise RemoteTimeoutError(f"Timed out fetching {url}") from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Failed to fetch {url}: {e}") from e

    async def fetch_text(self, url: str, timeout: Optional[float] = None) -> str:
        """GET a URL and decode the body as text"""
        body = await self._request(url, timeout)
        logger.debug(f"Fetched {len(body)} bytes from {url}")
        return body.decode("utf-8", errors="replace")

    async def fetch_bytes(self, url: str, timeout: Optional[float] = None) -> bytes:
        """GET a URL and return the raw body"""
        return await self._request(url, timeout)

    async def close(self):
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None
