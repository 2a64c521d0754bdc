"""Unit tests for region encoding."""

import pytest
from PIL import Image

from image_helper.core.errors import UnsupportedSource
from image_helper.core.image_encoder import EMPTY_DATA_URL, PillowRasterizer, decode_data_url

from conftest import Opaque, decode, make_image, pixel


class TestPillowRasterizer:
    def test_full_image(self):
        src = make_image(32, 16)
        encoded = PillowRasterizer().encode(src, 32, 16)
        assert encoded.startswith("data:image/png;base64,")
        img = decode(encoded)
        assert img.size == (32, 16)
        assert img.getpixel((31, 15)) == pixel(31, 15)

    def test_region_with_offset(self):
        img = decode(PillowRasterizer().encode(make_image(32, 16), 8, 4, 16, 8))
        assert img.size == (8, 4)
        assert img.getpixel((0, 0)) == pixel(16, 8)

    def test_missing_offsets_crop_from_origin(self):
        img = decode(PillowRasterizer().encode(make_image(32, 16), 4, 4))
        assert img.getpixel((0, 0)) == pixel(0, 0)

    def test_region_past_source_is_transparent(self):
        img = decode(PillowRasterizer().encode(make_image(16, 16), 16, 16, 8, 0))
        assert img.size == (16, 16)
        assert img.getpixel((0, 0)) == pixel(8, 0)
        assert img.getpixel((15, 0))[3] == 0

    def test_rgb_source(self):
        src = Image.new("RGB", (4, 4), (10, 20, 30))
        img = decode(PillowRasterizer().encode(src, 4, 4))
        assert img.getpixel((1, 1)) == (10, 20, 30, 255)

    def test_empty_region(self):
        assert PillowRasterizer().encode(make_image(), 0, 16) == EMPTY_DATA_URL

    def test_jpeg_format(self):
        encoded = PillowRasterizer("jpeg").encode(make_image(), 8, 8)
        assert encoded.startswith("data:image/jpeg;base64,")

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unsupported"):
            PillowRasterizer("tga")

    def test_non_addressable_source(self):
        rasterizer = PillowRasterizer()
        assert not rasterizer.can_encode(Opaque())
        with pytest.raises(UnsupportedSource):
            rasterizer.encode(Opaque(), 16, 16)


class TestDecodeDataUrl:
    def test_not_a_data_url(self):
        with pytest.raises(ValueError, match="base64 data URL"):
            decode_data_url("https://example.com/a.png")

    def test_empty_canvas(self):
        with pytest.raises(ValueError):
            decode_data_url(EMPTY_DATA_URL)
