import asyncio

import aiohttp
import pytest
from aioresponses import aioresponses

from vodcollect.collector.client import RemoteFetchClient, build_api_url, build_query_url, with_page
from vodcollect.errors import HttpStatusError, NetworkError, RemoteTimeoutError

URL = "http://api.test/provide/vod?ac=detail&pg=1"


def test_build_api_url_query_separator():
    assert build_api_url("http://x/api", "detail") == "http://x/api?ac=detail"
    assert build_api_url("http://x/api?", "detail") == "http://x/api?ac=detail"
    assert build_api_url("http://x/api?key=1", "list") == "http://x/api?key=1&ac=list"


def test_build_api_url_hours_filter():
    assert build_api_url("http://x/api", "detail", 24) == "http://x/api?ac=detail&h=24"


def test_with_page_and_query_url():
    assert with_page("http://x/api?ac=detail", 3) == "http://x/api?ac=detail&pg=3"
    assert build_query_url("http://x/api", page=2, type_id="5", wd="hello world") == (
        "http://x/api?ac=detail&pg=2&t=5&wd=hello%20world"
    )
    assert build_query_url("http://x/api") == "http://x/api?ac=detail"


async def test_fetch_text_returns_body():
    async with RemoteFetchClient(timeout=5) as client:
        with aioresponses() as mocked:
            mocked.get(URL, status=200, body='{"code": 1}')
            assert await client.fetch_text(URL) == '{"code": 1}'


async def test_fetch_bytes_returns_raw_body():
    async with RemoteFetchClient(timeout=5) as client:
        with aioresponses() as mocked:
            mocked.get("http://img.test/a.jpg", status=200, body=b"\x89PNG")
            assert await client.fetch_bytes("http://img.test/a.jpg") == b"\x89PNG"


async def test_error_status_is_typed():
    async with RemoteFetchClient(timeout=5) as client:
        with aioresponses() as mocked:
            mocked.get(URL, status=503)
            with pytest.raises(HttpStatusError) as excinfo:
                await client.fetch_text(URL)
    assert excinfo.value.status == 503


async def test_timeout_is_typed():
    async with RemoteFetchClient(timeout=5) as client:
        with aioresponses() as mocked:
            mocked.get(URL, exception=asyncio.TimeoutError())
            with pytest.raises(RemoteTimeoutError):
                await client.fetch_text(URL)


async def test_connection_error_is_typed():
    async with RemoteFetchClient(timeout=5) as client:
        with aioresponses() as mocked:
            mocked.get(URL, exception=aiohttp.ClientConnectionError("refused"))
            with pytest.raises(NetworkError):
                await client.fetch_text(URL)


async def test_close_is_idempotent():
    client = RemoteFetchClient()
    await client.close()
    await client.close()
    assert client.session is None
