"""Tests for the command-line interface."""

import re
import zipfile

import pytest
from click.testing import CliRunner
from PIL import Image, UnidentifiedImageError

import tileposter.config as config_module
from tileposter.cli import build_project, main, timestamped_filename
from tileposter.models.poster import PosterProject


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch, tmp_path):
    monkeypatch.setenv("TILEPOSTER_OUTPUT_DIR", str(tmp_path / "default-output"))
    monkeypatch.setattr(config_module, "_config", None)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def photo_path(tmp_path, photo_image):
    path = tmp_path / "photo.png"
    photo_image.save(path)
    return path


def test_timestamped_filename():
    assert re.fullmatch(r"holiday_\d{8}_\d{6}\.zip", timestamped_filename("holiday", "zip"))


class TestBuildProject:
    """Test option overrides on top of defaults or a project file."""

    def test_defaults(self):
        project = build_project()
        assert (project.grid.rows, project.grid.cols) == (2, 2)
        assert project.page.name == "A4"

    def test_overrides(self):
        project = build_project(rows=3, cols=1, orientation="landscape", page="a3", pan_x=0.0, zoom=2.0)
        assert (project.grid.rows, project.grid.cols) == (3, 1)
        assert project.orientation.value == "landscape"
        assert project.page.name == "A3"
        assert project.crop.x == 0.0
        assert project.crop.scale == 2.0

    def test_from_file_keeps_project_dir(self, tmp_path):
        PosterProject(name="saved").to_yaml(tmp_path / "project.yaml")
        project = build_project(project_path=str(tmp_path), cols=4)
        assert project.name == "saved"
        assert project.grid.cols == 4
        assert project.project_dir == tmp_path


class TestCli:
    """Test commands end to end."""

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("init", "window", "split"):
            assert command in result.output

    def test_init(self, runner, tmp_path):
        target = tmp_path / "holiday"
        result = runner.invoke(main, ["init", "Holiday", "-o", str(target), "--rows", "3", "--page", "a3"])
        assert result.exit_code == 0, result.output
        project = PosterProject.from_yaml(target / "project.yaml")
        assert project.name == "Holiday"
        assert project.grid.rows == 3
        assert project.page.name == "A3"
        assert (target / "output").is_dir()

    def test_window(self, runner, photo_path):
        result = runner.invoke(main, ["window", str(photo_path), "--rows", "2", "--cols", "2"])
        assert result.exit_code == 0, result.output
        assert "Capture window" in result.output
        assert "93.93" in result.output
        assert "106.07" in result.output

    def test_window_rejects_invalid_pan(self, runner, photo_path):
        result = runner.invoke(main, ["window", str(photo_path), "--pan-x", "1.5"])
        assert result.exit_code == 1
        assert "Invalid poster settings" in result.output

    def test_split_zip_and_dir(self, runner, photo_path, tmp_path):
        out = tmp_path / "out"
        result = runner.invoke(
            main, ["split", str(photo_path), "-o", str(out), "--no-pdf", "--zip", "--dir", "-w", "2"]
        )
        assert result.exit_code == 0, result.output

        archives = list(out.glob("poster_*.zip"))
        assert len(archives) == 1
        with zipfile.ZipFile(archives[0]) as archive:
            assert len(archive.namelist()) == 4
        assert sorted(p.name for p in (out / "poster_tiles").iterdir()) == [
            "tile-1-1.jpg", "tile-1-2.jpg", "tile-2-1.jpg", "tile-2-2.jpg",
        ]

    def test_split_pdf_into_project(self, runner, photo_path, tmp_path):
        target = tmp_path / "banner"
        runner.invoke(main, ["init", "banner", "-o", str(target), "--rows", "1", "--cols", "3"])
        result = runner.invoke(main, ["split", str(photo_path), "-p", str(target)])
        assert result.exit_code == 0, result.output
        pdfs = list((target / "output").glob("banner_*.pdf"))
        assert len(pdfs) == 1
        assert pdfs[0].read_bytes().startswith(b"%PDF")

    def test_split_nothing_selected(self, runner, photo_path):
        result = runner.invoke(main, ["split", str(photo_path), "--no-pdf"])
        assert result.exit_code == 1
        assert "Nothing to write" in result.output

    @pytest.mark.parametrize("command", ["window", "split"])
    def test_unreadable_image(self, runner, tmp_path, command):
        bogus = tmp_path / "notes.jpg"
        bogus.write_text("not an image")
        result = runner.invoke(main, [command, str(bogus)])
        assert result.exit_code == 1
        assert "Could not read image" in result.output
        assert not isinstance(result.exception, UnidentifiedImageError)

    def test_oversized_image(self, runner, photo_path, monkeypatch):
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
        result = runner.invoke(main, ["split", str(photo_path)])
        assert result.exit_code == 1
        assert "Could not read image" in result.output

    def test_split_missing_image(self, runner, tmp_path):
        result = runner.invoke(main, ["split", str(tmp_path / "missing.jpg")])
        assert result.exit_code == 2
