"""Poster pipeline: resolve the capture window, then rasterize every sheet."""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..models.poster import PosterProject
from ..models.tile import CaptureWindow, Tile
from ..utils.image_utils import PixelBuffer, to_image
from .crop_service import resolve_capture_window
from .raster_service import RasterService

logger = logging.getLogger(__name__)


@dataclass
class PosterResult:
    """Output of one pipeline run."""

    window: CaptureWindow
    tiles: list[Tile]
    rows: int
    cols: int
    elapsed: float = 0.0
    created_at: float = field(default_factory=time.time)

    @property
    def tile_size(self) -> tuple[int, int]:
        """(width, height) shared by every tile of the run."""
        first = self.tiles[0]
        return (first.width, first.height)

    def tile_at(self, row: int, col: int) -> Tile:
        """Look up a tile by grid position."""
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise ValueError(f"Tile ({row}, {col}) not found in {self.rows}x{self.cols} grid")
        return self.tiles[row * self.cols + col]


class PosterService:
    """Runs the crop resolver and tile rasterizer for a poster project."""

    def __init__(self, project: PosterProject, max_workers: int = 1):
        """
        Initialize poster service.

        Args:
            project: Poster configuration
            max_workers: Threads used for tile rasterization
        """
        self.project = project
        self.raster = RasterService(
            quality=project.output.jpeg_quality,
            background=project.output.background_color,
            max_workers=max_workers,
        )

    def resolve(self, image_width: int, image_height: int) -> CaptureWindow:
        """Capture window of this project for an image of the given size."""
        project = self.project
        return resolve_capture_window(
            image_width,
            image_height,
            project.grid.rows,
            project.grid.cols,
            project.orientation,
            pan=project.crop.pan,
            zoom=project.crop.scale,
            page=project.page,
        )

    def split(
        self,
        image: PixelBuffer,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> PosterResult:
        """Produce every tile of the poster from a decoded source image."""
        start = time.time()
        source = to_image(image, self.raster.background)
        window = self.resolve(source.width, source.height)

        _, page_h = self.project.page_dimensions
        tiles = self.raster.rasterize_tiles(
            source,
            window,
            self.project.grid.rows,
            self.project.grid.cols,
            overlap_mm=self.project.output.overlap_mm,
            page_height_mm=page_h,
            progress_callback=progress_callback,
        )

        elapsed = time.time() - start
        logger.info("Split '%s' into %d tiles in %.2fs", self.project.name, len(tiles), elapsed)
        return PosterResult(
            window=window,
            tiles=tiles,
            rows=self.project.grid.rows,
            cols=self.project.grid.cols,
            elapsed=elapsed,
        )


def split_poster(image: PixelBuffer, project: PosterProject, max_workers: int = 1) -> list[Tile]:
    """Resolve and rasterize in one call; returns tiles in row-major order."""
    return PosterService(project, max_workers=max_workers).split(image).tiles
