"""Capture window and tile endpoints."""

import asyncio
import logging

from fastapi import APIRouter, HTTPException
from PIL import Image, UnidentifiedImageError

from ...errors import InvalidConfiguration, RasterizationFailure
from ...models.poster import PosterProject
from ...services.poster_service import PosterResult, PosterService
from ...utils.image_utils import decode_data_url, image_from_bytes
from ..schemas import (
    PosterSettings,
    TileSchema,
    TilesRequest,
    TilesResponse,
    WindowRequest,
    WindowResponse,
)
from ..sessions import session_manager

logger = logging.getLogger(__name__)

router = APIRouter()


def build_project(settings: PosterSettings, name: str = "poster") -> PosterProject:
    """Convert request settings into a project.

    Raises:
        HTTPException: If the sheet size preset is unknown
    """
    try:
        return settings.to_project(name=name)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


def decode_image(value: str) -> Image.Image:
    """Decode an uploaded image.

    Raises:
        HTTPException: If the payload is not a decodable image
    """
    try:
        return image_from_bytes(decode_data_url(value))
    except (ValueError, UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        raise HTTPException(status_code=400, detail=f"Could not decode image: {e}")


async def run_pipeline(request: TilesRequest) -> PosterResult:
    """Run the poster pipeline for a request, honouring session supersession.

    Raises:
        HTTPException: 422 for invalid settings, 409 when superseded,
            500 when a tile could not be produced
    """
    project = build_project(request.settings, request.name)
    image = decode_image(request.image)

    try:
        if request.session:
            scheduler = await session_manager.get(request.session)
            result = await scheduler.render(image, project)
            if result is None:
                raise HTTPException(
                    status_code=409,
                    detail="Superseded by a newer request in the same session",
                )
            return result
        return await asyncio.to_thread(PosterService(project).split, image)
    except InvalidConfiguration as e:
        raise HTTPException(status_code=422, detail=str(e))
    except RasterizationFailure as e:
        logger.error("Tile rasterization failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/window", response_model=WindowResponse)
async def resolve_window(request: WindowRequest):
    """Resolve the capture window for an image of the given size."""
    project = build_project(request.settings)
    try:
        window = PosterService(project).resolve(request.image_width, request.image_height)
    except InvalidConfiguration as e:
        raise HTTPException(status_code=422, detail=str(e))
    return WindowResponse.from_window(window, project.grid.rows, project.grid.cols)


@router.post("/tiles", response_model=TilesResponse)
async def create_tiles(request: TilesRequest):
    """Split an image into tiles, returned as data URLs in row-major order."""
    result = await run_pipeline(request)
    settings = request.settings
    return TilesResponse(
        rows=result.rows,
        cols=result.cols,
        orientation=settings.orientation,
        window=WindowResponse.from_window(result.window, result.rows, result.cols),
        tiles=[TileSchema.from_tile(tile) for tile in result.tiles],
    )


@router.delete("/sessions/{session_id}")
async def close_session(session_id: str):
    """Cancel any render in flight for a session and forget it."""
    if not await session_manager.close(session_id):
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return {"success": True, "message": f"Session '{session_id}' closed"}
