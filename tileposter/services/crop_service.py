"""Crop geometry: which part of the photo ends up on the printed grid.

The poster grid has a fixed physical aspect ratio (``cols * page_w`` by
``rows * page_h``). The capture window is the rectangle of the source image
with that same aspect ratio which gets spread over every sheet:

1. At zoom 1 the window is the largest one that fits in the image
   ("cover" fit, the excess dimension is cropped).
2. Zooming in divides both window sides by the zoom factor.
3. Panning interpolates the top-left corner between the two extreme
   positions that keep the window inside the image.
"""

import logging
import math
import operator
from typing import Sequence

from ..errors import InvalidConfiguration
from ..models.poster import A4, Orientation, PageSize
from ..models.tile import CaptureWindow, SourceRect

logger = logging.getLogger(__name__)


def _require_finite(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(value):
        raise InvalidConfiguration(f"{name} must be finite, got {value}")
    return value


def _require_positive(name: str, value: float) -> float:
    value = _require_finite(name, value)
    if value <= 0:
        raise InvalidConfiguration(f"{name} must be positive, got {value}")
    return value


def _require_count(name: str, value: int) -> int:
    if isinstance(value, bool):
        raise InvalidConfiguration(f"{name} must be an integer, got {value!r}")
    try:
        value = operator.index(value)
    except TypeError:
        raise InvalidConfiguration(f"{name} must be an integer, got {value!r}") from None
    if value < 1:
        raise InvalidConfiguration(f"{name} must be at least 1, got {value}")
    return value


def _require_pixels(name: str, value: int) -> int:
    value = _require_positive(name, value)
    if not value.is_integer():
        raise InvalidConfiguration(f"{name} must be a whole number of pixels, got {value}")
    return int(value)


def _require_unit(name: str, value: float) -> float:
    value = _require_finite(name, value)
    if not 0.0 <= value <= 1.0:
        raise InvalidConfiguration(f"{name} must be within [0, 1], got {value}")
    return value


def grid_ratio(rows: int, cols: int, page_width_mm: float, page_height_mm: float) -> float:
    """Aspect ratio (width / height) of the assembled poster."""
    rows = _require_count("rows", rows)
    cols = _require_count("cols", cols)
    page_width_mm = _require_positive("page width", page_width_mm)
    page_height_mm = _require_positive("page height", page_height_mm)
    return (cols * page_width_mm) / (rows * page_height_mm)


def cover_size(image_width: float, image_height: float, ratio: float) -> tuple[float, float]:
    """Largest (width, height) with aspect `ratio` that fits inside the image."""
    if image_width / image_height > ratio:
        # Image is wider than the grid: full height, cropped sides
        return (image_height * ratio, float(image_height))
    # Image is taller than (or as tall as) the grid: full width, cropped top/bottom
    return (float(image_width), image_width / ratio)


def resolve_capture_window(
    image_width: int,
    image_height: int,
    rows: int,
    cols: int,
    orientation: Orientation,
    pan: Sequence[float] = (0.5, 0.5),
    zoom: float = 1.0,
    page: PageSize = A4,
) -> CaptureWindow:
    """Compute the capture window for a poster configuration.

    Args:
        image_width: Source image width in pixels
        image_height: Source image height in pixels
        rows: Number of sheet rows
        cols: Number of sheet columns
        orientation: Sheet orientation, picks which page side is horizontal
        pan: Normalized (x, y) pan; 0 = left/top edge, 1 = right/bottom edge
        zoom: Zoom factor; 1 = cover fit, larger values shrink the window
        page: Physical sheet size

    Returns:
        CaptureWindow in source pixel coordinates

    Raises:
        InvalidConfiguration: For zero/negative/fractional dimensions, bad
            counts, pan values outside [0, 1], or a zoom whose window would
            not be a finite, non-empty rectangle
    """
    width = _require_pixels("image width", image_width)
    height = _require_pixels("image height", image_height)
    zoom = _require_positive("zoom", zoom)
    try:
        pan_x, pan_y = pan
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"pan must be an (x, y) pair, got {pan!r}") from None
    pan_x = _require_unit("pan x", pan_x)
    pan_y = _require_unit("pan y", pan_y)

    try:
        orientation = Orientation(orientation)
    except ValueError:
        raise InvalidConfiguration(f"Unknown orientation {orientation!r}") from None

    page_w, page_h = page.dimensions(orientation)
    ratio = grid_ratio(rows, cols, page_w, page_h)

    base_w, base_h = cover_size(width, height, ratio)
    capture_w = base_w / zoom
    capture_h = base_h / zoom

    # Pan range; negative when zoom < 1 makes the window larger than the image
    max_x = width - capture_w
    max_y = height - capture_h
    x = max_x * pan_x
    y = max_y * pan_y

    # Extreme zoom values overflow (zoom -> 0) or underflow (zoom -> inf)
    finite = all(math.isfinite(v) for v in (x, y, capture_w, capture_h))
    if not finite or min(capture_w, capture_h) <= 0:
        raise InvalidConfiguration(f"zoom {zoom!r} gives an unusable capture window")

    window = CaptureWindow(
        x=x,
        y=y,
        width=capture_w,
        height=capture_h,
        image_width=width,
        image_height=height,
    )
    logger.debug(
        "Resolved %s for %dx%d grid (%s, ratio %.4f, pan %.3f/%.3f, zoom %.2f)",
        window, rows, cols, orientation.value, ratio, pan_x, pan_y, zoom,
    )
    return window


def pixels_per_mm(window: SourceRect, rows: int, page_height_mm: float) -> float:
    """Source pixels per printed millimetre, measured along the vertical axis."""
    rows = _require_count("rows", rows)
    page_height_mm = _require_positive("page height", page_height_mm)
    return window.height / (rows * page_height_mm)


def cell_rects(
    window: SourceRect,
    rows: int,
    cols: int,
    overlap_px: float = 0.0,
) -> list[SourceRect]:
    """Split the window into equal cells, row-major, each grown by `overlap_px`.

    With zero overlap the cells partition the window exactly.
    """
    rows = _require_count("rows", rows)
    cols = _require_count("cols", cols)
    overlap_px = _require_finite("overlap", overlap_px)
    if overlap_px < 0:
        raise InvalidConfiguration(f"overlap must not be negative, got {overlap_px}")

    cell_w = window.width / cols
    cell_h = window.height / rows

    rects = []
    for r in range(rows):
        for c in range(cols):
            nominal = SourceRect(
                x=window.x + c * cell_w,
                y=window.y + r * cell_h,
                width=cell_w,
                height=cell_h,
            )
            rects.append(nominal.expanded(overlap_px) if overlap_px else nominal)
    return rects
