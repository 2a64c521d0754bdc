"""Shared fixtures and fakes for the image_helper test suite."""

import asyncio
from typing import Any, Dict, Iterable, List, Optional

import pytest
from PIL import Image

from image_helper.api.base import HostEngine
from image_helper.core.image_encoder import PillowRasterizer, decode_data_url


def make_image(w: int = 32, h: int = 16) -> Image.Image:
    """Return an RGBA image whose pixel (x, y) is (x*8, y*8, 128, 255)."""
    img = Image.new("RGBA", (w, h))
    img.putdata([((x * 8) % 256, (y * 8) % 256, 128, 255) for y in range(h) for x in range(w)])
    return img


def pixel(x: int, y: int):
    return ((x * 8) % 256, (y * 8) % 256, 128, 255)


def decode(data_url: str) -> Image.Image:
    return decode_data_url(data_url)


class Opaque:
    """A loaded handle with no addressable pixels (like a render target)."""
    width = 16
    height = 16


class FakeHostEngine(HostEngine):
    """In-memory host engine that can stall, fail or hold loads."""

    def __init__(
        self,
        sources: Optional[Dict[str, Any]] = None,
        stall: Iterable[str] = (),
        fail: Iterable[str] = (),
    ):
        self.sources = dict(sources or {})
        self.stall = set(stall)
        self.fail = set(fail)
        self.textures: Dict[str, Any] = {}
        self.registered: Dict[str, str] = {}
        self.removed: List[str] = []
        self.started: List[str] = []
        self.finished: List[str] = []
        self.active = 0
        self.max_active = 0
        self.release: Optional[asyncio.Event] = None

    async def load_image(self, key: str, url: str) -> None:
        self.started.append(key)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if key in self.stall:
                await asyncio.Event().wait()
            if self.release is not None:
                await self.release.wait()
            await asyncio.sleep(0)
            if key in self.fail:
                raise OSError(f"cannot load {url}")
            self.textures[key] = self.sources[url]
        finally:
            self.active -= 1
        self.finished.append(key)

    def get_loaded_image(self, key: str) -> Any:
        return self.textures[key]

    def register_encoded_texture(self, key: str, encoded: str) -> None:
        self.registered[key] = encoded
        self.textures[key] = decode_data_url(encoded)

    def remove_texture(self, key: str) -> None:
        self.removed.append(key)
        self.textures.pop(key, None)

    def create_nine_slice_node(self, x, y, key, width, height,
                               left_width, right_width, top_height, bottom_height):
        return {
            "x": x, "y": y, "key": key, "width": width, "height": height,
            "left_width": left_width, "right_width": right_width,
            "top_height": top_height, "bottom_height": bottom_height,
        }


class RecordingRasterizer(PillowRasterizer):
    """PillowRasterizer that remembers every region it encoded."""

    def __init__(self):
        super().__init__("PNG")
        self.calls = []

    def encode(self, source, width, height, offset_x=None, offset_y=None):
        self.calls.append((width, height, offset_x or 0, offset_y or 0))
        return super().encode(source, width, height, offset_x, offset_y)


@pytest.fixture
def rasterizer() -> RecordingRasterizer:
    return RecordingRasterizer()
