"""
Shared fixtures: in-memory SQLite catalog, scripted remote client, recorded sleeps
"""
import json
import os
import tempfile

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("IMAGE_DIR", tempfile.mkdtemp(prefix="vodcollect-images-"))

import pytest

from vodcollect.database import Database
from vodcollect.errors import NetworkError
from vodcollect.models import Binding, CollectionSource, Video
from vodcollect.models.base import utcnow
from vodcollect.tasks import TaskRegistry


class FakeClient:
    """Serves scripted bodies per URL; an exception value is raised instead"""

    def __init__(self, responses=None, default=None):
        self.responses = dict(responses or {})
        self.default = default
        self.calls = []

    def set(self, url, body):
        self.responses[url] = body

    async def _lookup(self, url):
        self.calls.append(url)
        value = self.responses.get(url, self.default)
        if callable(value) and not isinstance(value, (str, bytes)):
            value = value(url)
        if isinstance(value, BaseException):
            raise value
        if value is None:
            raise NetworkError(f"No scripted response for {url}")
        return value

    async def fetch_text(self, url, timeout=None):
        value = await self._lookup(url)
        return value.decode() if isinstance(value, bytes) else value

    async def fetch_bytes(self, url, timeout=None):
        value = await self._lookup(url)
        return value.encode() if isinstance(value, str) else value

    async def close(self):
        pass


class RecordingSleep:
    """Drop-in for asyncio.sleep that returns immediately"""

    def __init__(self, on_sleep=None):
        self.calls = []
        self.on_sleep = on_sleep

    async def __call__(self, seconds):
        self.calls.append(seconds)
        if self.on_sleep:
            await self.on_sleep(seconds)


def vod_item(name, type_id=1, play_from="src1", play_url="ep1$http://v/1", **extra):
    item = {
        "vod_name": name,
        "type_id": type_id,
        "vod_play_from": play_from,
        "vod_play_url": play_url,
        "vod_remarks": extra.pop("vod_remarks", "HD"),
    }
    item.update(extra)
    return item


def vod_page(items, total=None, limit=20, page=1, code=1):
    return json.dumps({
        "code": code,
        "msg": "ok",
        "page": page,
        "pagecount": 1,
        "limit": str(limit),
        "total": str(len(items) if total is None else total),
        "list": items,
    })


@pytest.fixture
async def database():
    db = Database("sqlite+aiosqlite:///:memory:")
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def registry():
    return TaskRegistry()


@pytest.fixture
def sleep():
    return RecordingSleep()


async def add_source(database, name="src1", api_url="http://api.test/provide/vod", **kwargs):
    async with database.session() as session:
        source = CollectionSource(name=name, api_url=api_url, **kwargs)
        session.add(source)
        await session.commit()
        return source


async def add_binding(database, source_flag="src1", external_id="1", local_type_id=10):
    async with database.session() as session:
        binding = Binding(
            source_flag=source_flag,
            external_id=external_id,
            local_type_id=local_type_id,
            local_type_name="Movies",
        )
        session.add(binding)
        await session.commit()
        return binding


async def add_video(database, name, play_sources, year=None):
    async with database.session() as session:
        video = Video(name=name, year=year, type_id=10, pubdate=utcnow(), play_sources=play_sources)
        session.add(video)
        await session.commit()
        return video
