"""Tests for image utilities."""

import base64
from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from tileposter.utils.image_utils import (
    decode_data_url,
    encode_jpeg,
    flatten_alpha,
    image_from_bytes,
    load_image,
    parse_color,
    to_image,
)


def png_bytes(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class TestParseColor:
    def test_hex(self):
        assert parse_color("#ff8000") == (255, 128, 0)

    def test_name(self):
        assert parse_color("white") == (255, 255, 255)

    def test_tuple(self):
        assert parse_color((1, 2, 3, 4)) == (1, 2, 3)


class TestToImage:
    """Test pixel buffer coercion."""

    def test_rgb_image_passthrough(self, solid_red_image):
        assert to_image(solid_red_image).mode == "RGB"

    def test_grayscale_array(self):
        image = to_image(np.full((4, 6), 128, dtype=np.uint8))
        assert image.mode == "RGB"
        assert image.size == (6, 4)
        assert image.getpixel((0, 0)) == (128, 128, 128)

    def test_rgb_array(self, gradient_array):
        image = to_image(gradient_array)
        assert np.array_equal(np.array(image), gradient_array)

    def test_rgba_array_flattened(self):
        arr = np.zeros((2, 2, 4), dtype=np.uint8)
        arr[0, 0] = [0, 0, 255, 255]
        image = to_image(arr)
        assert image.getpixel((0, 0)) == (0, 0, 255)
        assert image.getpixel((1, 1)) == (255, 255, 255)

    def test_float_array_clipped(self):
        image = to_image(np.full((2, 2, 3), 300.0))
        assert image.getpixel((0, 0)) == (255, 255, 255)

    def test_bad_shape(self):
        with pytest.raises(ValueError):
            to_image(np.zeros((2, 2, 2), dtype=np.uint8))

    def test_bad_type(self):
        with pytest.raises(TypeError):
            to_image([[0, 0], [0, 0]])


class TestFlattenAlpha:
    def test_custom_background(self):
        clear = Image.new("RGBA", (2, 2), (255, 0, 0, 0))
        assert flatten_alpha(clear, (0, 0, 0)).getpixel((0, 0)) == (0, 0, 0)

    def test_grayscale_converted(self):
        assert flatten_alpha(Image.new("L", (2, 2), 10)).mode == "RGB"


class TestCodecs:
    """Test encoding and decoding helpers."""

    def test_encode_jpeg(self, solid_red_image):
        data = encode_jpeg(solid_red_image, quality=90)
        assert data[:2] == b"\xff\xd8"
        assert Image.open(BytesIO(data)).size == (64, 64)

    def test_encode_converts_mode(self):
        data = encode_jpeg(Image.new("RGBA", (4, 4), (0, 0, 0, 255)))
        assert Image.open(BytesIO(data)).mode == "RGB"

    def test_image_from_bytes(self, quadrant_image):
        image = image_from_bytes(png_bytes(quadrant_image))
        assert image.size == (40, 30)
        assert image.getpixel((0, 0)) == (255, 0, 0)

    def test_load_image(self, tmp_path, quadrant_image):
        path = tmp_path / "photo.png"
        quadrant_image.save(path)
        assert load_image(path).size == (40, 30)

    def test_decode_data_url(self):
        payload = base64.b64encode(b"hello").decode()
        assert decode_data_url(f"data:image/png;base64,{payload}") == b"hello"

    def test_decode_bare_base64(self):
        assert decode_data_url(base64.b64encode(b"hi").decode()) == b"hi"

    def test_decode_invalid(self):
        with pytest.raises(ValueError):
            decode_data_url("data:image/png;base64,!!not base64!!")
