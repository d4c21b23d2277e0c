"""API request/response models."""

from typing import Optional

from pydantic import BaseModel, Field

from ..models.poster import (
    CropSettings,
    GridShape,
    Orientation,
    OutputSettings,
    PosterProject,
    get_page_size,
)
from ..models.tile import CaptureWindow, Tile


# =============================================================================
# Poster settings
# =============================================================================


class PosterSettings(BaseModel):
    """Grid, sheet, crop and output settings sent by the editor."""

    rows: int = Field(default=2, ge=1, le=10)
    cols: int = Field(default=2, ge=1, le=10)
    orientation: Orientation = Orientation.PORTRAIT
    page: str = Field(default="A4", description="Sheet size preset name")
    x: float = Field(default=0.5, ge=0.0, le=1.0, description="Horizontal pan")
    y: float = Field(default=0.5, ge=0.0, le=1.0, description="Vertical pan")
    scale: float = Field(default=1.0, gt=0.0, le=5.0, description="Zoom factor")
    overlap_mm: float = Field(default=0.0, ge=0.0, le=50.0)
    jpeg_quality: int = Field(default=95, ge=1, le=100)

    def to_project(self, name: str = "poster") -> PosterProject:
        return PosterProject(
            name=name,
            grid=GridShape(rows=self.rows, cols=self.cols),
            orientation=self.orientation,
            page=get_page_size(self.page),
            crop=CropSettings(x=self.x, y=self.y, scale=self.scale),
            output=OutputSettings(jpeg_quality=self.jpeg_quality, overlap_mm=self.overlap_mm),
        )


# =============================================================================
# Capture window
# =============================================================================


class WindowRequest(BaseModel):
    """Resolve a capture window without sending pixels."""

    image_width: int
    image_height: int
    settings: PosterSettings = Field(default_factory=PosterSettings)


class WindowResponse(BaseModel):
    """Capture window in source pixels, plus derived layout numbers."""

    sx: float
    sy: float
    width: float
    height: float
    max_x: float
    max_y: float
    tile_width: float
    tile_height: float
    normalized: tuple[float, float, float, float]

    @classmethod
    def from_window(cls, window: CaptureWindow, rows: int, cols: int) -> "WindowResponse":
        return cls(
            sx=window.sx,
            sy=window.sy,
            width=window.width,
            height=window.height,
            max_x=window.max_x,
            max_y=window.max_y,
            tile_width=window.width / cols,
            tile_height=window.height / rows,
            normalized=window.normalized,
        )


# =============================================================================
# Tiles
# =============================================================================


class TilesRequest(BaseModel):
    """Split an uploaded image."""

    image: str = Field(..., min_length=1, description="Image as a data URL or base64 string")
    settings: PosterSettings = Field(default_factory=PosterSettings)
    name: str = Field(default="poster", min_length=1)
    session: Optional[str] = Field(
        default=None,
        description="Editor session; a newer request in the same session supersedes older ones",
    )


class TileSchema(BaseModel):
    """One encoded tile."""

    id: str
    row: int
    col: int
    width: int
    height: int
    filename: str
    data_url: str

    @classmethod
    def from_tile(cls, tile: Tile) -> "TileSchema":
        return cls(
            id=tile.id,
            row=tile.row,
            col=tile.col,
            width=tile.width,
            height=tile.height,
            filename=tile.filename,
            data_url=tile.data_url,
        )


class TilesResponse(BaseModel):
    """All tiles of a poster, row-major."""

    rows: int
    cols: int
    orientation: Orientation
    window: WindowResponse
    tiles: list[TileSchema]
