"""Exceptions raised by the poster tiling engine."""

from typing import Optional


class PosterError(Exception):
    """Base class for all poster tiling errors."""


class InvalidConfiguration(PosterError, ValueError):
    """Raised when image dimensions, grid shape or pan/zoom are unusable.

    Always raised before any rasterization starts, so no partial output exists.
    """


class RasterizationFailure(PosterError, RuntimeError):
    """Raised when a tile canvas could not be created or encoded.

    Fatal for the whole batch; no partial tile list is returned.
    """

    def __init__(self, message: str, row: Optional[int] = None, col: Optional[int] = None):
        super().__init__(message)
        self.row = row
        self.col = col
