"""API routers for the poster splitter."""

from . import export, poster

__all__ = ["poster", "export"]
