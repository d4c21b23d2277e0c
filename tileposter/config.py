"""Configuration management for the poster splitter."""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from .models.poster import PAGE_SIZES, PageSize


class AppConfig(BaseModel):
    """Application-level configuration."""

    # Directories
    output_dir: Path = Field(
        default=Path.cwd() / "output",
        description="Default output directory",
    )

    # Rendering defaults
    jpeg_quality: int = Field(default=95, ge=1, le=100, description="JPEG quality per tile")
    background_color: str = Field(default="#ffffff", description="Fill outside the photo")
    max_workers: int = Field(default=1, ge=1, le=64, description="Tile rasterization threads")
    debounce_seconds: float = Field(
        default=0.3,
        ge=0.0,
        description="Delay before an interactive re-render starts",
    )

    # Editor sessions
    max_sessions: int = Field(default=32, ge=1, description="Render sessions kept at once")
    session_idle_seconds: float = Field(
        default=900.0,
        ge=0.0,
        description="Idle time after which a render session is dropped",
    )

    # Sheet size (A4 unless overridden)
    page_short_mm: float = Field(default=210.0, gt=0, description="Short side of a sheet (mm)")
    page_long_mm: float = Field(default=297.0, gt=0, description="Long side of a sheet (mm)")

    @property
    def page(self) -> PageSize:
        """Default sheet size, matched to a named preset when possible."""
        for preset in PAGE_SIZES.values():
            if (preset.short_mm, preset.long_mm) == (self.page_short_mm, self.page_long_mm):
                return preset.model_copy()
        return PageSize(name="custom", short_mm=self.page_short_mm, long_mm=self.page_long_mm)

    @classmethod
    def load(cls) -> "AppConfig":
        """Load configuration from environment and defaults."""
        fields = cls.model_fields
        env = os.environ
        return cls(
            output_dir=Path(env.get("TILEPOSTER_OUTPUT_DIR", str(fields["output_dir"].default))),
            jpeg_quality=int(env.get("TILEPOSTER_JPEG_QUALITY", fields["jpeg_quality"].default)),
            background_color=env.get("TILEPOSTER_BACKGROUND", fields["background_color"].default),
            max_workers=int(env.get("TILEPOSTER_MAX_WORKERS", fields["max_workers"].default)),
            debounce_seconds=float(
                env.get("TILEPOSTER_DEBOUNCE_SECONDS", fields["debounce_seconds"].default)
            ),
            max_sessions=int(env.get("TILEPOSTER_MAX_SESSIONS", fields["max_sessions"].default)),
            session_idle_seconds=float(
                env.get("TILEPOSTER_SESSION_IDLE_SECONDS", fields["session_idle_seconds"].default)
            ),
            page_short_mm=float(env.get("TILEPOSTER_PAGE_SHORT_MM", fields["page_short_mm"].default)),
            page_long_mm=float(env.get("TILEPOSTER_PAGE_LONG_MM", fields["page_long_mm"].default)),
        )

    def ensure_directories(self) -> None:
        """Create necessary directories."""
        self.output_dir.mkdir(parents=True, exist_ok=True)


# Global config instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get or create global configuration."""
    global _config
    if _config is None:
        _config = AppConfig.load()
    return _config
