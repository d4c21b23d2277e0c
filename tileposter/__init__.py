"""Tile one photo across a grid of printable sheets."""

from .errors import InvalidConfiguration, PosterError, RasterizationFailure
from .models.poster import Orientation, PosterProject
from .services.crop_service import resolve_capture_window
from .services.poster_service import split_poster
from .services.raster_service import RasterService, rasterize_tiles

__version__ = "0.1.0"

__all__ = [
    "InvalidConfiguration",
    "PosterError",
    "RasterizationFailure",
    "Orientation",
    "PosterProject",
    "resolve_capture_window",
    "split_poster",
    "RasterService",
    "rasterize_tiles",
]
