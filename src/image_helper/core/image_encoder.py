"""
image_encoder.py: Crop pixel regions from loaded images and serialize them as data URLs.

The encoded form is a self-contained ``data:image/png;base64,...`` string that
can be used outside the host engine, e.g. as the ``src`` of an overlay UI
element. Regions extending past the source are padded with transparent
pixels, the way a canvas draws an out-of-range source rectangle.

Dependencies:
    pip install pillow pillow-heif
"""

import base64
import io
from abc import ABC, abstractmethod
from typing import Any, Optional

try:
    from pillow_heif import register_heif_opener
    register_heif_opener()
except ImportError:
    pass

from PIL import Image

from .errors import UnsupportedSource
from ..utils.log_utils import get_logger

logger = get_logger(__name__)

# What an empty canvas serializes to.
EMPTY_DATA_URL = "data:,"

_MIME_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
    "GIF": "image/gif",
}


class Rasterizer(ABC):
    """Turns a region of a source image into a portable encoded string."""

    def can_encode(self, source: Any) -> bool:
        """Return True if ``source`` is a pixel source this rasterizer can read."""
        return True

    @abstractmethod
    def encode(
        self,
        source: Any,
        width: int,
        height: int,
        offset_x: Optional[int] = None,
        offset_y: Optional[int] = None,
    ) -> str:
        """Crop ``width`` x ``height`` pixels at the offset and encode them.

        Omitted offsets crop from the origin.
        """


class PillowRasterizer(Rasterizer):
    """Rasterizer for ``PIL.Image.Image`` sources."""

    def __init__(self, image_format: str = "PNG"):
        image_format = image_format.upper()
        if image_format not in _MIME_TYPES:
            raise ValueError(f"Unsupported encode format: {image_format}")
        self.image_format = image_format
        self.mime_type = _MIME_TYPES[image_format]

    def can_encode(self, source: Any) -> bool:
        return isinstance(source, Image.Image)

    def encode(
        self,
        source: Any,
        width: int,
        height: int,
        offset_x: Optional[int] = None,
        offset_y: Optional[int] = None,
    ) -> str:
        if not self.can_encode(source):
            raise UnsupportedSource(f"Cannot rasterize {type(source).__name__}")
        if width <= 0 or height <= 0:
            return EMPTY_DATA_URL

        x = offset_x or 0
        y = offset_y or 0
        img = source if source.mode == "RGBA" else source.convert("RGBA")
        region = img.crop((x, y, x + width, y + height))
        if self.image_format == "JPEG":
            region = region.convert("RGB")

        buffer = io.BytesIO()
        region.save(buffer, format=self.image_format)
        b64 = base64.b64encode(buffer.getvalue()).decode("utf-8")
        logger.debug("Encoded %dx%d region at (%d, %d)", width, height, x, y)
        return f"data:{self.mime_type};base64,{b64}"


def decode_data_url(data_url: str) -> Image.Image:
    """Decode a base64 data URL back into a loaded PIL image."""
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError(f"Not a base64 data URL: {data_url[:40]!r}")
    img = Image.open(io.BytesIO(base64.b64decode(payload)))
    img.load()
    return img
