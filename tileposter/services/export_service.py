"""Packaging of finished tiles: printable PDF, ZIP archive, loose files."""

import logging
import zipfile
from io import BytesIO
from pathlib import Path
from typing import Sequence, Union

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ..models.poster import A4, Orientation, PageSize
from ..models.tile import Tile

logger = logging.getLogger(__name__)

ARCHIVE_FOLDER = "poster-tiles"


def _ordered(tiles: Sequence[Tile]) -> list[Tile]:
    if not tiles:
        raise ValueError("No tiles to export")
    return sorted(tiles, key=lambda t: (t.row, t.col))


class ExportService:
    """Assembles tiles into a document or archive, one page/file per tile."""

    def __init__(self, page: PageSize = A4, orientation: Orientation = Orientation.PORTRAIT):
        """
        Initialize export service.

        Args:
            page: Physical sheet size each tile is printed on
            orientation: Sheet orientation used for every page
        """
        self.page = page
        self.orientation = Orientation(orientation)

    def build_pdf(self, tiles: Sequence[Tile], title: str = "Poster") -> bytes:
        """Create a PDF with one full-bleed page per tile, row-major.

        Args:
            tiles: Tiles to place
            title: Document title metadata

        Returns:
            PDF document bytes
        """
        tiles = _ordered(tiles)
        page_w, page_h = self.page.dimensions_points(self.orientation)

        buffer = BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=(page_w, page_h))
        pdf.setTitle(title)

        for tile in tiles:
            # ReportLab origin is bottom-left; stretch the tile over the whole page
            pdf.drawImage(ImageReader(BytesIO(tile.data)), 0, 0, width=page_w, height=page_h)
            pdf.showPage()

        pdf.save()
        logger.info(
            "Built %d-page %s %s PDF", len(tiles), self.page.name, self.orientation.value
        )
        return buffer.getvalue()

    def build_zip(self, tiles: Sequence[Tile]) -> bytes:
        """Bundle encoded tiles as `poster-tiles/tile-{row}-{col}.jpg` (1-based)."""
        tiles = _ordered(tiles)
        buffer = BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for tile in tiles:
                archive.writestr(f"{ARCHIVE_FOLDER}/{tile.filename}", tile.data)
        logger.info("Built archive with %d tiles", len(tiles))
        return buffer.getvalue()

    def save_pdf(self, tiles: Sequence[Tile], path: Union[str, Path], title: str = "Poster") -> Path:
        """Write the PDF to disk."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.build_pdf(tiles, title=title))
        return path

    def save_zip(self, tiles: Sequence[Tile], path: Union[str, Path]) -> Path:
        """Write the ZIP archive to disk."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.build_zip(tiles))
        return path

    def save_directory(self, tiles: Sequence[Tile], output_dir: Union[str, Path]) -> list[Path]:
        """Write each tile as its own JPEG file."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        paths = []
        for tile in _ordered(tiles):
            path = output_dir / tile.filename
            path.write_bytes(tile.data)
            paths.append(path)
        return paths
