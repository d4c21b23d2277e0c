"""Shared test fixtures."""

import numpy as np
import pytest
from PIL import Image

from tileposter.models.poster import (
    CropSettings,
    GridShape,
    Orientation,
    OutputSettings,
    PosterProject,
)
from tileposter.models.tile import CaptureWindow


@pytest.fixture
def sample_project():
    """2x2 portrait A4 poster, centered, no zoom."""
    return PosterProject(
        name="test-poster",
        grid=GridShape(rows=2, cols=2),
        orientation=Orientation.PORTRAIT,
    )


@pytest.fixture
def landscape_project():
    """1x3 landscape A4 banner panned to the top-left corner."""
    return PosterProject(
        name="banner",
        grid=GridShape(rows=1, cols=3),
        orientation=Orientation.LANDSCAPE,
        crop=CropSettings(x=0.0, y=0.0, scale=1.0),
        output=OutputSettings(jpeg_quality=90),
    )


@pytest.fixture
def solid_red_image():
    """64x64 solid red RGB image."""
    return Image.new("RGB", (64, 64), (255, 0, 0))


@pytest.fixture
def quadrant_image():
    """40x30 image with four solid quadrants, 20x15 each."""
    arr = np.zeros((30, 40, 3), dtype=np.uint8)
    # Red top-left
    arr[:15, :20] = [255, 0, 0]
    # Green top-right
    arr[:15, 20:] = [0, 255, 0]
    # Blue bottom-left
    arr[15:, :20] = [0, 0, 255]
    # Black bottom-right
    arr[15:, 20:] = [0, 0, 0]
    return Image.fromarray(arr)


@pytest.fixture
def gradient_array():
    """30x40 RGB array where every pixel is unique within a row and column."""
    arr = np.zeros((30, 40, 3), dtype=np.uint8)
    arr[:, :, 0] = np.tile(np.arange(40, dtype=np.uint8) * 6, (30, 1))
    arr[:, :, 1] = np.tile((np.arange(30, dtype=np.uint8) * 8).reshape(30, 1), (1, 40))
    arr[:, :, 2] = 100
    return arr


@pytest.fixture
def gradient_image(gradient_array):
    return Image.fromarray(gradient_array)


@pytest.fixture
def photo_image():
    """400x300 landscape photo stand-in with a smooth gradient."""
    arr = np.zeros((300, 400, 3), dtype=np.uint8)
    arr[:, :, 0] = np.tile(np.linspace(0, 255, 400).astype(np.uint8), (300, 1))
    arr[:, :, 1] = np.tile(np.linspace(0, 255, 300).astype(np.uint8).reshape(300, 1), (1, 400))
    arr[:, :, 2] = 128
    return Image.fromarray(arr)


@pytest.fixture
def full_window():
    """Integer-aligned window covering all of a 40x30 image."""
    return CaptureWindow(x=0, y=0, width=40, height=30, image_width=40, image_height=30)
