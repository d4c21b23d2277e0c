"""Data models for poster tiling."""

from .poster import (
    A4,
    PAGE_SIZES,
    CropSettings,
    GridShape,
    Orientation,
    OutputSettings,
    PageSize,
    PosterProject,
    get_page_size,
)
from .tile import CaptureWindow, SourceRect, Tile

__all__ = [
    "A4",
    "PAGE_SIZES",
    "CropSettings",
    "GridShape",
    "Orientation",
    "OutputSettings",
    "PageSize",
    "PosterProject",
    "get_page_size",
    "CaptureWindow",
    "SourceRect",
    "Tile",
]
