"""Geometry and tile value objects."""

import base64
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class SourceRect:
    """Axis-aligned rectangle in source-image pixel coordinates.

    Coordinates are real-valued; tile boundaries fall on sub-pixel positions.
    """

    x: float
    """Left edge (pixels)."""

    y: float
    """Top edge (pixels)."""

    width: float
    """Horizontal extent (pixels)."""

    height: float
    """Vertical extent (pixels)."""

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """Get (left, top, right, bottom) bounds."""
        return (self.x, self.y, self.right, self.bottom)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def expanded(self, margin: float) -> "SourceRect":
        """Grow the rectangle by `margin` on all four sides."""
        return SourceRect(
            x=self.x - margin,
            y=self.y - margin,
            width=self.width + 2 * margin,
            height=self.height + 2 * margin,
        )

    def intersect(self, width: float, height: float) -> Optional["SourceRect"]:
        """Clip against the image bounds [0, width] x [0, height].

        Returns None when nothing of the rectangle lies inside the image.
        """
        left = max(0.0, self.x)
        top = max(0.0, self.y)
        right = min(float(width), self.right)
        bottom = min(float(height), self.bottom)
        if right <= left or bottom <= top:
            return None
        return SourceRect(x=left, y=top, width=right - left, height=bottom - top)

    def __str__(self) -> str:
        return f"({self.x:.2f},{self.y:.2f}) {self.width:.2f}x{self.height:.2f}"


@dataclass(frozen=True)
class CaptureWindow(SourceRect):
    """Region of the source image spread across the whole printed grid."""

    image_width: int = 0
    """Width of the source image the window was resolved against."""

    image_height: int = 0
    """Height of the source image the window was resolved against."""

    @property
    def sx(self) -> float:
        return self.x

    @property
    def sy(self) -> float:
        return self.y

    @property
    def max_x(self) -> float:
        """Horizontal pan range: offset at which the right edges touch."""
        return self.image_width - self.width

    @property
    def max_y(self) -> float:
        """Vertical pan range: offset at which the bottom edges touch."""
        return self.image_height - self.height

    @property
    def normalized(self) -> tuple[float, float, float, float]:
        """(x, y, width, height) as fractions of the image size, for overlays."""
        return (
            self.x / self.image_width,
            self.y / self.image_height,
            self.width / self.image_width,
            self.height / self.image_height,
        )

    def __str__(self) -> str:
        return f"CaptureWindow{SourceRect.__str__(self)} in {self.image_width}x{self.image_height}"


@dataclass(frozen=True)
class Tile:
    """One printed sheet of the poster."""

    row: int
    """0-based grid row, top to bottom."""

    col: int
    """0-based grid column, left to right."""

    data: bytes = field(repr=False)
    """Encoded raster image (JPEG)."""

    width: int
    """Pixel width of the encoded image."""

    height: int
    """Pixel height of the encoded image."""

    source: SourceRect
    """Requested source rectangle, overlap included."""

    media_type: str = "image/jpeg"

    @property
    def id(self) -> str:
        """Identifier used by UI layers."""
        return f"r{self.row}-c{self.col}"

    @property
    def filename(self) -> str:
        """Deterministic archive name, 1-based."""
        return f"tile-{self.row + 1}-{self.col + 1}.jpg"

    @property
    def data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.media_type};base64,{encoded}"

    def __str__(self) -> str:
        return f"Tile[{self.id}] {self.width}x{self.height} from {self.source}"
