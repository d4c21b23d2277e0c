"""Image processing utilities."""

import base64
import binascii
from io import BytesIO
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, ImageColor, ImageOps

PixelBuffer = Union[Image.Image, np.ndarray]

WHITE = (255, 255, 255)


def parse_color(color: Union[str, tuple[int, int, int]]) -> tuple[int, int, int]:
    """Convert '#rrggbb', a color name or an RGB tuple into an RGB tuple."""
    if isinstance(color, str):
        return ImageColor.getrgb(color)[:3]
    return tuple(int(c) for c in color[:3])


def flatten_alpha(image: Image.Image, background: tuple[int, int, int] = WHITE) -> Image.Image:
    """Composite an image onto a solid background and return it as RGB."""
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        image = image.convert("RGBA")
        flattened = Image.new("RGB", image.size, background)
        flattened.paste(image, mask=image.split()[3])
        return flattened
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def to_image(buffer: PixelBuffer, background: tuple[int, int, int] = WHITE) -> Image.Image:
    """Coerce a pixel buffer into an RGB PIL image.

    Accepts a PIL image or a uint8 numpy array shaped (H, W), (H, W, 3) or (H, W, 4).
    """
    if isinstance(buffer, np.ndarray):
        if buffer.dtype != np.uint8:
            buffer = np.clip(buffer, 0, 255).astype(np.uint8)
        if not (buffer.ndim == 2 or (buffer.ndim == 3 and buffer.shape[2] in (3, 4))):
            raise ValueError(f"Unsupported pixel buffer shape: {buffer.shape}")
        # uint8 (H, W), (H, W, 3) and (H, W, 4) map to L, RGB and RGBA
        image = Image.fromarray(buffer)
    elif isinstance(buffer, Image.Image):
        image = buffer
    else:
        raise TypeError(f"Expected a PIL image or numpy array, got {type(buffer).__name__}")

    return flatten_alpha(image, background)


def load_image(path: Union[str, Path]) -> Image.Image:
    """Load an image from file, honouring EXIF orientation."""
    with Image.open(path) as img:
        img = ImageOps.exif_transpose(img)
        img.load()
    return img


def image_from_bytes(data: bytes) -> Image.Image:
    """Decode an encoded image (PNG, JPEG, ...)."""
    img = Image.open(BytesIO(data))
    img = ImageOps.exif_transpose(img)
    img.load()
    return img


def decode_data_url(value: str) -> bytes:
    """Decode a 'data:image/...;base64,' URL or a bare base64 string."""
    if value.startswith("data:"):
        _, _, value = value.partition(",")
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as e:
        raise ValueError("Invalid base64 image data") from e


def encode_jpeg(image: Image.Image, quality: int = 95) -> bytes:
    """Encode an image as JPEG bytes."""
    if image.mode != "RGB":
        image = image.convert("RGB")
    buffer = BytesIO()
    image.save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()

