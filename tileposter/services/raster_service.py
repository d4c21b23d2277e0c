"""Tile rasterization: cut the capture window into printable sheets.

Each grid cell gets its own canvas, pre-filled with the background color.
The cell's source rectangle (grown by the overlap margin) is clipped to the
image bounds and only the in-bounds part is copied, 1:1 in pixels, at the
offset that keeps neighbouring tiles geometrically continuous. Whatever falls
outside the photo stays background.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional, Union

from PIL import Image

from ..errors import InvalidConfiguration, RasterizationFailure
from ..models.tile import CaptureWindow, SourceRect, Tile
from ..utils.image_utils import PixelBuffer, encode_jpeg, parse_color, to_image
from .crop_service import cell_rects, pixels_per_mm

logger = logging.getLogger(__name__)

# Canvas extents are truncated like a drawing surface sized with fractional
# values; the epsilon keeps 1499.9999999 from losing a whole pixel.
_EXTENT_EPSILON = 1e-6


def canvas_extent(value: float) -> int:
    """Integer pixel extent of a tile canvas side."""
    return max(1, int(math.floor(value + _EXTENT_EPSILON)))


class RasterService:
    """Produces encoded tiles from a source image and a capture window."""

    def __init__(
        self,
        quality: int = 95,
        background: Union[str, tuple[int, int, int]] = "#ffffff",
        max_workers: int = 1,
    ):
        """
        Initialize raster service.

        Args:
            quality: JPEG quality for every tile (1-100)
            background: Fill color for regions outside the source image
            max_workers: Threads used to rasterize tiles (1 = sequential)
        """
        if not 1 <= quality <= 100:
            raise InvalidConfiguration(f"JPEG quality must be within 1-100, got {quality}")
        if max_workers < 1:
            raise InvalidConfiguration(f"max_workers must be at least 1, got {max_workers}")
        self.quality = quality
        self.background = parse_color(background)
        self.max_workers = max_workers

    def plan_tiles(
        self,
        window: SourceRect,
        rows: int,
        cols: int,
        overlap_mm: float = 0.0,
        page_height_mm: Optional[float] = None,
    ) -> tuple[list[SourceRect], tuple[int, int]]:
        """Compute requested source rectangles and the shared canvas size.

        Args:
            window: Capture window
            rows: Number of sheet rows
            cols: Number of sheet columns
            overlap_mm: Bleed margin added on every side of each tile (mm)
            page_height_mm: Sheet height, needed to convert a non-zero overlap

        Returns:
            Tuple of (row-major rectangles, (canvas_width, canvas_height))
        """
        if window.width <= 0 or window.height <= 0:
            raise InvalidConfiguration(f"Capture window is empty: {window}")
        if not math.isfinite(overlap_mm) or overlap_mm < 0:
            raise InvalidConfiguration(f"overlap_mm must be a non-negative number, got {overlap_mm}")

        overlap_px = 0.0
        if overlap_mm > 0:
            if page_height_mm is None:
                raise InvalidConfiguration("page_height_mm is required for a non-zero overlap")
            overlap_px = overlap_mm * pixels_per_mm(window, rows, page_height_mm)

        rects = cell_rects(window, rows, cols, overlap_px)
        canvas_size = (
            canvas_extent(window.width / cols + 2 * overlap_px),
            canvas_extent(window.height / rows + 2 * overlap_px),
        )
        return rects, canvas_size

    def render_tile(
        self,
        image: Image.Image,
        rect: SourceRect,
        canvas_size: tuple[int, int],
    ) -> Image.Image:
        """Rasterize one source rectangle onto a fresh background canvas.

        Args:
            image: RGB source image
            rect: Requested source rectangle (may exceed the image bounds)
            canvas_size: Output (width, height) in pixels

        Returns:
            RGB canvas owned by the caller
        """
        canvas = Image.new("RGB", canvas_size, self.background)

        visible = rect.intersect(image.width, image.height)
        if visible is None:
            return canvas

        # Destination box of the in-bounds part, snapped to whole pixels
        dx = visible.x - rect.x
        dy = visible.y - rect.y
        left = max(0, round(dx))
        top = max(0, round(dy))
        right = min(canvas_size[0], round(dx + visible.width))
        bottom = min(canvas_size[1], round(dy + visible.height))
        if right <= left or bottom <= top:
            return canvas

        src_x = rect.x + left
        src_y = rect.y + top
        size = (right - left, bottom - top)

        if float(src_x).is_integer() and float(src_y).is_integer():
            sx, sy = int(src_x), int(src_y)
            patch = image.crop((sx, sy, sx + size[0], sy + size[1]))
        else:
            patch = image.transform(
                size,
                Image.Transform.AFFINE,
                (1, 0, src_x, 0, 1, src_y),
                resample=Image.Resampling.BILINEAR,
                fillcolor=self.background,
            )

        canvas.paste(patch, (left, top))
        return canvas

    def _produce_tile(
        self,
        image: Image.Image,
        row: int,
        col: int,
        rect: SourceRect,
        canvas_size: tuple[int, int],
    ) -> Tile:
        try:
            canvas = self.render_tile(image, rect, canvas_size)
        except (MemoryError, OSError, ValueError) as e:
            raise RasterizationFailure(
                f"Could not build canvas for tile ({row}, {col}): {e}", row=row, col=col
            ) from e

        try:
            data = encode_jpeg(canvas, self.quality)
        except (OSError, ValueError) as e:
            raise RasterizationFailure(
                f"Could not encode tile ({row}, {col}): {e}", row=row, col=col
            ) from e

        return Tile(
            row=row,
            col=col,
            data=data,
            width=canvas.width,
            height=canvas.height,
            source=rect,
        )

    def rasterize_tiles(
        self,
        image: PixelBuffer,
        window: CaptureWindow,
        rows: int,
        cols: int,
        overlap_mm: float = 0.0,
        page_height_mm: Optional[float] = None,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> list[Tile]:
        """Rasterize every grid cell into an encoded tile.

        Args:
            image: Source pixel buffer (PIL image or uint8 numpy array)
            window: Capture window from the crop resolver
            rows: Number of sheet rows
            cols: Number of sheet columns
            overlap_mm: Bleed margin on every side of each tile (mm)
            page_height_mm: Sheet height in the chosen orientation (mm)
            progress_callback: Optional callback(completed, total)

        Returns:
            Tiles in row-major order

        Raises:
            InvalidConfiguration: For an empty window, bad counts or overlap
            RasterizationFailure: If any tile fails; no partial list is returned
        """
        rects, canvas_size = self.plan_tiles(window, rows, cols, overlap_mm, page_height_mm)
        try:
            source = to_image(image, self.background)
            source.load()
        except (OSError, TypeError, ValueError) as e:
            raise RasterizationFailure(f"Unusable source pixel buffer: {e}") from e

        jobs = [(i // cols, i % cols, rect) for i, rect in enumerate(rects)]
        total = len(jobs)
        logger.info(
            "Rasterizing %d tiles (%dx%d grid) at %dx%d px from %s",
            total, rows, cols, canvas_size[0], canvas_size[1], window,
        )

        if self.max_workers == 1 or total == 1:
            tiles = []
            for row, col, rect in jobs:
                tiles.append(self._produce_tile(source, row, col, rect, canvas_size))
                if progress_callback:
                    progress_callback(len(tiles), total)
            return tiles

        slots: list[Optional[Tile]] = [None] * total
        completed = 0
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                pool.submit(self._produce_tile, source, row, col, rect, canvas_size): index
                for index, (row, col, rect) in enumerate(jobs)
            }
            for future in as_completed(futures):
                try:
                    slots[futures[future]] = future.result()
                except RasterizationFailure:
                    for pending in futures:
                        pending.cancel()
                    raise
                completed += 1
                if progress_callback:
                    progress_callback(completed, total)

        return slots


def rasterize_tiles(
    image: PixelBuffer,
    window: CaptureWindow,
    rows: int,
    cols: int,
    overlap_mm: float = 0.0,
    page_height_mm: Optional[float] = None,
    quality: int = 95,
) -> list[Tile]:
    """Rasterize with a default, sequential RasterService."""
    return RasterService(quality=quality).rasterize_tiles(
        image, window, rows, cols, overlap_mm=overlap_mm, page_height_mm=page_height_mm
    )
