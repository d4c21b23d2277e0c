"""Utility functions for poster tiling."""

from .image_utils import (
    PixelBuffer,
    decode_data_url,
    encode_jpeg,
    flatten_alpha,
    image_from_bytes,
    load_image,
    parse_color,
    to_image,
)

__all__ = [
    "PixelBuffer",
    "decode_data_url",
    "encode_jpeg",
    "flatten_alpha",
    "image_from_bytes",
    "load_image",
    "parse_color",
    "to_image",
]
