"""Poster Splitter API - FastAPI application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import get_config
from .routers import export, poster
from .sessions import session_manager


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    config = get_config()
    config.ensure_directories()

    yield

    # Shutdown
    await session_manager.cancel_all()


app = FastAPI(
    title="Poster Splitter API",
    description="Tile one photo across a grid of printable sheets",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware - allow all origins in development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(poster.router, prefix="/api", tags=["poster"])
app.include_router(export.router, prefix="/api/export", tags=["export"])


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.get("/api/config")
async def get_api_config():
    """Get API configuration (non-sensitive)."""
    config = get_config()
    page = config.page
    return {
        "output_dir": str(config.output_dir),
        "jpeg_quality": config.jpeg_quality,
        "background_color": config.background_color,
        "max_workers": config.max_workers,
        "debounce_seconds": config.debounce_seconds,
        "max_sessions": config.max_sessions,
        "session_idle_seconds": config.session_idle_seconds,
        "page": {"name": page.name, "short_mm": page.short_mm, "long_mm": page.long_mm},
    }
