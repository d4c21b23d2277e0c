"""Integration tests for project files and the file-based pipeline."""

import zipfile

import yaml

from tileposter.models.poster import (
    CropSettings,
    GridShape,
    Orientation,
    OutputSettings,
    PosterProject,
    get_page_size,
)
from tileposter.services.export_service import ExportService
from tileposter.services.poster_service import PosterService
from tileposter.utils.image_utils import load_image


class TestProjectYaml:
    """Test saving and loading project files."""

    def test_roundtrip(self, tmp_path):
        project = PosterProject(
            name="Holiday",
            grid=GridShape(rows=3, cols=4),
            orientation=Orientation.LANDSCAPE,
            page=get_page_size("A3"),
            crop=CropSettings(x=0.2, y=0.8, scale=1.5),
            output=OutputSettings(jpeg_quality=88, overlap_mm=3),
        )
        path = tmp_path / "project.yaml"
        project.to_yaml(path)

        loaded = PosterProject.from_yaml(path)
        assert loaded.model_dump() == project.model_dump()
        assert loaded.project_dir == tmp_path
        assert loaded.output_dir == tmp_path / "output"

    def test_file_is_plain_yaml(self, tmp_path):
        path = tmp_path / "project.yaml"
        PosterProject(orientation=Orientation.LANDSCAPE).to_yaml(path)
        data = yaml.safe_load(path.read_text())
        assert data["orientation"] == "landscape"
        assert "project_dir" not in data

    def test_partial_file_uses_defaults(self, tmp_path):
        path = tmp_path / "project.yaml"
        path.write_text("name: minimal\ngrid:\n  rows: 1\n")
        project = PosterProject.from_yaml(path)
        assert project.grid.rows == 1
        assert project.grid.cols == 2
        assert project.page.name == "A4"

    def test_ensure_directories(self, tmp_path):
        path = tmp_path / "project.yaml"
        PosterProject().to_yaml(path)
        project = PosterProject.from_yaml(path)
        project.ensure_directories()
        assert (tmp_path / "output").is_dir()


def test_photo_file_to_archive(tmp_path, photo_image, landscape_project):
    photo_path = tmp_path / "photo.jpg"
    photo_image.save(photo_path, quality=95)

    result = PosterService(landscape_project, max_workers=3).split(load_image(photo_path))
    archive_path = ExportService(landscape_project.page, landscape_project.orientation).save_zip(
        result.tiles, tmp_path / "banner.zip"
    )

    with zipfile.ZipFile(archive_path) as archive:
        names = archive.namelist()
    assert names == [
        "poster-tiles/tile-1-1.jpg",
        "poster-tiles/tile-1-2.jpg",
        "poster-tiles/tile-1-3.jpg",
    ]
    # 400 px wide window split into thirds of a landscape strip
    assert result.tile_size == (133, 94)
