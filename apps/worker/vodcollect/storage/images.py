"""
Local poster storage with retrying download and optional WebP transcoding
"""
import asyncio
import os
import uuid
from io import BytesIO
from typing import Awaitable, Callable, Optional
from urllib.parse import urlparse

from PIL import Image

from ..config import settings
from ..errors import DownloadError, NetworkError
from ..logging_config import setup_logging

logger = setup_logging(__name__)

Sleep = Callable[[float], Awaitable[None]]


def transcode_to_webp(image_data: bytes, quality: int) -> bytes:
    """Decode any Pillow-readable image and re-encode it as lossy WebP"""
    with Image.open(BytesIO(image_data)) as image:
        # Convert to RGB if necessary
        if image.mode != 'RGB':
            image = image.convert('RGB')
        buffer = BytesIO()
        image.save(buffer, format='WEBP', quality=quality)
        return buffer.getvalue()


def get_file_extension(url: str) -> str:
    """Get file extension from URL"""
    path = urlparse(url).path.lower()

    if path.endswith(('.jpg', '.jpeg')):
        return '.jpg'
    elif path.endswith('.png'):
        return '.png'
    elif path.endswith('.gif'):
        return '.gif'
    elif path.endswith('.webp'):
        return '.webp'
    elif path.endswith('.bmp'):
        return '.bmp'
    else:
        return '.jpg'  # Default


class ImageLocalizer:
    """Downloads remote posters into IMAGE_DIR"""

    def __init__(
        self,
        client,
        image_dir: Optional[str] = None,
        url_prefix: Optional[str] = None,
        quality: Optional[int] = None,
        default_retry: Optional[int] = None,
        sleep: Sleep = asyncio.sleep
    ):
        config = settings.get_image_config()
        self.client = client
        self.image_dir = image_dir or config["image_dir"]
        self.url_prefix = (url_prefix or config["url_prefix"]).rstrip("/")
        self.quality = quality or config["quality"]
        self.default_retry = default_retry or config["default_retry"]
        self.sleep = sleep

    def _write(self, file_name: str, data: bytes):
        os.makedirs(self.image_dir, exist_ok=True)
        with open(os.path.join(self.image_dir, file_name), "wb") as f:
            f.write(data)

    async def _download_once(self, remote_url: str, file_name: str, convert_to_webp: bool):
        data = await self.client.fetch_bytes(remote_url)
        if convert_to_webp:
            data = await asyncio.to_thread(transcode_to_webp, data, self.quality)
        await asyncio.to_thread(self._write, file_name, data)

    async def localize(self, remote_url: str, retry_count: int = 0, convert_to_webp: bool = False) -> str:
        """
        Store a remote image locally and return its public path

        Args:
            remote_url: Poster URL
            retry_count: Attempts to make; non-positive means the default
            convert_to_webp: Transcode to WebP instead of keeping the bytes

        Returns:
            Path such as /static/images/<uuid>.webp

        Raises:
            DownloadError: when every attempt failed
        """
        attempts = retry_count if retry_count > 0 else self.default_retry
        extension = '.webp' if convert_to_webp else get_file_extension(remote_url)
        file_name = f"{uuid.uuid4()}{extension}"

        last_error: Optional[BaseException] = None
        for attempt in range(1, attempts + 1):
            try:
                await self._download_once(remote_url, file_name, convert_to_webp)
                logger.debug(f"Localized {remote_url} -> {file_name} (attempt {attempt})")
                return f"{self.url_prefix}/{file_name}"
            except (NetworkError, OSError, ValueError, Image.DecompressionBombError) as e:
                last_error = e
                logger.warning(f"Image download failed ({attempt}/{attempts}) for {remote_url}: {e}")
                if attempt < attempts:
                    await self.sleep(2 ** (attempt - 1))

        raise DownloadError(remote_url, attempts, last_error) from last_error
