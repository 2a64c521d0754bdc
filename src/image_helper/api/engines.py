"""
Pillow-backed host engine.

Keeps textures as ``PIL.Image.Image`` objects in memory. Sources can be local
paths, ``file://`` URLs, ``http(s)://`` URLs (fetched with aiohttp, retried on
transient errors) or base64 ``data:`` URLs.
"""

import asyncio
import io
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import unquote, urlparse

import aiohttp
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
from PIL import Image

from .base import HostEngine
from ..core.image_encoder import decode_data_url
from ..utils.log_utils import get_logger

logger = get_logger(__name__)


@dataclass
class RenderTarget:
    """A texture backed by a render target rather than addressable pixels."""
    width: int
    height: int


@dataclass
class NineSliceNode:
    """Display node drawing a registered texture as a resizable nine-slice."""
    x: float
    y: float
    key: str
    texture: Any
    width: float
    height: float
    left_width: int
    right_width: int
    top_height: int
    bottom_height: int


def _open_image(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


def _open_path(path: str) -> Image.Image:
    with Image.open(path) as img:
        img.load()
        return img.copy()


class PillowHostEngine(HostEngine):
    """In-memory texture store loading images with Pillow."""

    def __init__(self, http_timeout: float = 30.0):
        self.http_timeout = http_timeout
        self.textures: Dict[str, Any] = {}
        self._session: Optional[aiohttp.ClientSession] = None

    async def load_image(self, key: str, url: str) -> None:
        logger.debug("Loading %s from %s", key, url[:80])
        scheme = urlparse(url).scheme.lower()
        if url.startswith("data:"):
            img = decode_data_url(url)
        elif scheme in ("http", "https"):
            img = _open_image(await self._fetch(url))
        else:
            path = unquote(urlparse(url).path) if scheme == "file" else url
            loop = asyncio.get_running_loop()
            img = await loop.run_in_executor(None, _open_path, path)
        self.textures[key] = img
        logger.debug("Loaded %s (%dx%d)", key, img.width, img.height)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((aiohttp.ClientError, asyncio.TimeoutError)),
        reraise=True,
    )
    async def _fetch(self, url: str) -> bytes:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.http_timeout)
            )
        async with self._session.get(url) as response:
            response.raise_for_status()
            return await response.read()

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    def get_loaded_image(self, key: str) -> Any:
        return self.textures[key]

    def register_encoded_texture(self, key: str, encoded: str) -> None:
        self.textures[key] = decode_data_url(encoded)

    def add_render_target(self, key: str, width: int, height: int) -> RenderTarget:
        target = RenderTarget(width, height)
        self.textures[key] = target
        return target

    def remove_texture(self, key: str) -> None:
        self.textures.pop(key, None)

    def create_nine_slice_node(
        self,
        x: float,
        y: float,
        key: str,
        width: float,
        height: float,
        left_width: int,
        right_width: int,
        top_height: int,
        bottom_height: int,
    ) -> NineSliceNode:
        return NineSliceNode(
            x=x,
            y=y,
            key=key,
            texture=self.get_loaded_image(key),
            width=width,
            height=height,
            left_width=left_width,
            right_width=right_width,
            top_height=top_height,
            bottom_height=bottom_height,
        )
