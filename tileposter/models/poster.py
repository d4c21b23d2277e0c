"""Poster project configuration models."""

from enum import Enum
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

MM_PER_INCH = 25.4
POINTS_PER_INCH = 72.0


class Orientation(str, Enum):
    """Page orientation: which page side runs horizontally."""

    PORTRAIT = "portrait"    # short side horizontal
    LANDSCAPE = "landscape"  # long side horizontal


class PageSize(BaseModel):
    """Physical size of one printed sheet, in millimetres."""

    name: str = Field(default="A4", description="Human-readable sheet name")
    short_mm: float = Field(default=210.0, gt=0, description="Short side of the sheet (mm)")
    long_mm: float = Field(default=297.0, gt=0, description="Long side of the sheet (mm)")

    @field_validator("long_mm")
    @classmethod
    def _long_not_shorter(cls, value: float, info) -> float:
        short = info.data.get("short_mm")
        if short is not None and value < short:
            raise ValueError("long_mm must not be smaller than short_mm")
        return value

    def dimensions(self, orientation: Orientation) -> tuple[float, float]:
        """Return (width_mm, height_mm) of a sheet for the given orientation."""
        if orientation == Orientation.PORTRAIT:
            return (self.short_mm, self.long_mm)
        return (self.long_mm, self.short_mm)

    def dimensions_points(self, orientation: Orientation) -> tuple[float, float]:
        """Return (width, height) in PDF points (1/72 inch)."""
        width_mm, height_mm = self.dimensions(orientation)
        factor = POINTS_PER_INCH / MM_PER_INCH
        return (width_mm * factor, height_mm * factor)


PAGE_SIZES = {
    "A3": PageSize(name="A3", short_mm=297.0, long_mm=420.0),
    "A4": PageSize(name="A4", short_mm=210.0, long_mm=297.0),
    "A5": PageSize(name="A5", short_mm=148.0, long_mm=210.0),
    "LETTER": PageSize(name="Letter", short_mm=215.9, long_mm=279.4),
}

A4 = PAGE_SIZES["A4"]


def get_page_size(name: str) -> PageSize:
    """Look up a named page size preset (case-insensitive)."""
    try:
        return PAGE_SIZES[name.upper()]
    except KeyError:
        raise ValueError(
            f"Unknown page size '{name}'. Available: {', '.join(sorted(PAGE_SIZES))}"
        ) from None


class GridShape(BaseModel):
    """How many sheets make up the poster."""

    rows: int = Field(default=2, ge=1, le=10, description="Number of sheet rows")
    cols: int = Field(default=2, ge=1, le=10, description="Number of sheet columns")

    @property
    def tile_count(self) -> int:
        return self.rows * self.cols


class CropSettings(BaseModel):
    """Pan and zoom of the capture window over the source image.

    x/y: 0 anchors the window to the left/top edge, 1 to the right/bottom edge.
    scale: 1 is the largest window that fits; larger values zoom in.
    """

    x: float = Field(default=0.5, ge=0.0, le=1.0, description="Horizontal pan (0-1)")
    y: float = Field(default=0.5, ge=0.0, le=1.0, description="Vertical pan (0-1)")
    scale: float = Field(default=1.0, gt=0.0, le=5.0, description="Zoom factor")

    @property
    def pan(self) -> tuple[float, float]:
        return (self.x, self.y)


class OutputSettings(BaseModel):
    """Tile encoding settings."""

    jpeg_quality: int = Field(default=95, ge=1, le=100, description="JPEG quality per tile")
    background_color: str = Field(
        default="#ffffff",
        description="Fill color for regions outside the source image",
    )
    overlap_mm: float = Field(
        default=0.0,
        ge=0.0,
        le=50.0,
        description="Bleed margin duplicated on each side of every tile (mm)",
    )


class PosterProject(BaseModel):
    """A single poster: grid, sheet, crop and output settings."""

    name: str = Field(default="poster", min_length=1, description="Poster name")
    grid: GridShape = Field(default_factory=GridShape)
    orientation: Orientation = Field(default=Orientation.PORTRAIT)
    page: PageSize = Field(default_factory=lambda: A4.model_copy())
    crop: CropSettings = Field(default_factory=CropSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)

    # Set when loading from file
    project_dir: Optional[Path] = Field(default=None, exclude=True)

    @property
    def page_dimensions(self) -> tuple[float, float]:
        """(width_mm, height_mm) of one sheet in this poster's orientation."""
        return self.page.dimensions(self.orientation)

    @property
    def poster_dimensions(self) -> tuple[float, float]:
        """(width_mm, height_mm) of the assembled poster."""
        page_w, page_h = self.page_dimensions
        return (self.grid.cols * page_w, self.grid.rows * page_h)

    @classmethod
    def from_yaml(cls, path: Path) -> "PosterProject":
        """Load a poster project from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        project = cls(**data)
        project.project_dir = Path(path).parent
        return project

    def to_yaml(self, path: Path) -> None:
        """Save the poster project to a YAML file."""
        data = self.model_dump(exclude={"project_dir"}, mode="json")
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    @property
    def output_dir(self) -> Path:
        """Directory for generated tiles and documents."""
        if self.project_dir is None:
            raise ValueError("Project not loaded from file")
        return self.project_dir / "output"

    def ensure_directories(self) -> None:
        """Create the output directory if it doesn't exist."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
