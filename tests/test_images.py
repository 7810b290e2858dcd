from io import BytesIO

import pytest
from PIL import Image

from vodcollect.collector.merger import VideoMerger
from vodcollect.collector.schemas import SourceConfig, VodEntry
from vodcollect.errors import DownloadError, HttpStatusError
from vodcollect.storage.images import ImageLocalizer, get_file_extension

from conftest import FakeClient, RecordingSleep

POSTER = "http://img.test/posters/a.png"


def _png_bytes(mode="RGBA"):
    buffer = BytesIO()
    Image.new(mode, (8, 6), color=(200, 10, 10, 255) if mode == "RGBA" else (200, 10, 10)).save(buffer, format="PNG")
    return buffer.getvalue()


def _localizer(tmp_path, client, sleep):
    return ImageLocalizer(client, image_dir=str(tmp_path), url_prefix="/static/images", quality=75, default_retry=3, sleep=sleep)


def test_extension_from_url():
    assert get_file_extension("http://x/a.JPEG?x=1") == ".jpg"
    assert get_file_extension("http://x/a.png") == ".png"
    assert get_file_extension("http://x/poster") == ".jpg"


async def test_converts_to_webp(tmp_path):
    client = FakeClient({POSTER: _png_bytes()})

    path = await _localizer(tmp_path, client, RecordingSleep()).localize(POSTER, 3, True)

    assert path.startswith("/static/images/") and path.endswith(".webp")
    stored = tmp_path / path.rsplit("/", 1)[1]
    with Image.open(stored) as image:
        assert image.format == "WEBP"
        assert image.size == (8, 6)


async def test_keeps_original_bytes_without_conversion(tmp_path):
    data = _png_bytes("RGB")
    client = FakeClient({POSTER: data})

    path = await _localizer(tmp_path, client, RecordingSleep()).localize(POSTER, 1, False)

    assert path.endswith(".png")
    assert (tmp_path / path.rsplit("/", 1)[1]).read_bytes() == data


async def test_unique_file_per_download(tmp_path):
    client = FakeClient({POSTER: _png_bytes("RGB")})
    localizer = _localizer(tmp_path, client, RecordingSleep())

    first = await localizer.localize(POSTER, 1, False)
    second = await localizer.localize(POSTER, 1, False)

    assert first != second


async def test_retries_with_backoff_then_raises(tmp_path):
    client = FakeClient({POSTER: HttpStatusError(POSTER, 404)})
    sleep = RecordingSleep()

    with pytest.raises(DownloadError) as excinfo:
        await _localizer(tmp_path, client, sleep).localize(POSTER, 3, False)

    assert len(client.calls) == 3
    assert sleep.calls == [1, 2]
    assert isinstance(excinfo.value.__cause__, HttpStatusError)
    assert list(tmp_path.iterdir()) == []


async def test_non_positive_retry_uses_default(tmp_path):
    client = FakeClient({POSTER: HttpStatusError(POSTER, 500)})

    with pytest.raises(DownloadError):
        await _localizer(tmp_path, client, RecordingSleep()).localize(POSTER, 0, False)

    assert len(client.calls) == 3


async def test_undecodable_image_counts_as_failed_attempt(tmp_path):
    client = FakeClient({POSTER: b"definitely not an image"})
    sleep = RecordingSleep()

    with pytest.raises(DownloadError):
        await _localizer(tmp_path, client, sleep).localize(POSTER, 2, True)

    assert sleep.calls == [1]


async def test_oversized_image_counts_as_failed_attempt(tmp_path, monkeypatch):
    # 8x6 is more than twice the limit, so Pillow refuses to decode it
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
    client = FakeClient({POSTER: _png_bytes("RGB")})
    sleep = RecordingSleep()

    with pytest.raises(DownloadError) as excinfo:
        await _localizer(tmp_path, client, sleep).localize(POSTER, 2, True)

    assert isinstance(excinfo.value.__cause__, Image.DecompressionBombError)
    assert sleep.calls == [1]
    assert list(tmp_path.iterdir()) == []


async def test_oversized_poster_keeps_remote_url(tmp_path, monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
    client = FakeClient({POSTER: _png_bytes("RGB")})
    merger = VideoMerger(_localizer(tmp_path, client, RecordingSleep()))
    entry = VodEntry(vod_name="Movie", type_id="1", vod_pic=POSTER, vod_play_from="m3u8", vod_play_url="ep1$http://v/1")
    source = SourceConfig(id=1, name="src1", api_url="http://api.test", sync_pictures=True, convert_webp=True, download_retry=1)

    result = await merger.merge(None, entry, 10, source)

    assert result.video.pic == POSTER
