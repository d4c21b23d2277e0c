"""Poster tiling services."""

from .crop_service import cell_rects, grid_ratio, pixels_per_mm, resolve_capture_window
from .export_service import ExportService
from .poster_service import PosterResult, PosterService, split_poster
from .raster_service import RasterService, rasterize_tiles
from .render_scheduler import RenderScheduler

__all__ = [
    "cell_rects",
    "grid_ratio",
    "pixels_per_mm",
    "resolve_capture_window",
    "ExportService",
    "PosterResult",
    "PosterService",
    "split_poster",
    "RasterService",
    "rasterize_tiles",
    "RenderScheduler",
]
