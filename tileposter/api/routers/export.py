"""PDF and ZIP download endpoints."""

from fastapi import APIRouter
from fastapi.responses import Response

from ...services.export_service import ExportService
from ..schemas import TilesRequest
from .poster import run_pipeline

router = APIRouter()


def _exporter(request: TilesRequest) -> ExportService:
    project = request.settings.to_project()
    return ExportService(page=project.page, orientation=project.orientation)


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


@router.post("/pdf")
async def export_pdf(request: TilesRequest):
    """Split the image and return a printable PDF, one page per tile."""
    result = await run_pipeline(request)
    pdf = _exporter(request).build_pdf(result.tiles, title=request.name)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers=_attachment(f"{request.name}.pdf"),
    )


@router.post("/zip")
async def export_zip(request: TilesRequest):
    """Split the image and return a ZIP archive of the tile images."""
    result = await run_pipeline(request)
    archive = _exporter(request).build_zip(result.tiles)
    return Response(
        content=archive,
        media_type="application/zip",
        headers=_attachment(f"{request.name}-tiles.zip"),
    )
