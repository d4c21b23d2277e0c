"""Command-line interface for the poster splitter."""

import functools
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import click
from PIL import Image
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from .config import get_config
from .errors import PosterError
from .models.poster import (
    PAGE_SIZES,
    CropSettings,
    GridShape,
    Orientation,
    OutputSettings,
    PosterProject,
    get_page_size,
)
from .services.export_service import ExportService
from .services.poster_service import PosterService
from .utils.image_utils import load_image


def timestamped_filename(base_name: str, extension: str = "pdf") -> str:
    """Generate a filename with timestamp to avoid overwrites.

    Args:
        base_name: Base name for the file (e.g., 'holiday_poster')
        extension: File extension without dot (default: 'pdf')

    Returns:
        Filename like 'holiday_poster_20240201_143052.pdf'
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{base_name}_{timestamp}.{extension}"


console = Console()


def poster_options(command):
    """Grid, sheet and crop options shared by commands that build a poster."""
    options = [
        click.option("--project", "-p", "project_path", type=click.Path(exists=True),
                     help="Poster project (YAML file or directory)"),
        click.option("--rows", "-r", type=click.IntRange(1, 10), help="Sheet rows"),
        click.option("--cols", "-c", type=click.IntRange(1, 10), help="Sheet columns"),
        click.option("--orientation", type=click.Choice([o.value for o in Orientation]),
                     help="Sheet orientation"),
        click.option("--page", type=click.Choice(sorted(PAGE_SIZES), case_sensitive=False),
                     help="Sheet size preset"),
        click.option("--pan-x", type=float, help="Horizontal pan, 0 (left) to 1 (right)"),
        click.option("--pan-y", type=float, help="Vertical pan, 0 (top) to 1 (bottom)"),
        click.option("--zoom", type=float, help="Zoom factor (1 = fill the grid)"),
        click.option("--overlap-mm", type=float, help="Bleed margin per tile side (mm)"),
    ]
    for option in reversed(options):
        command = option(command)

    @functools.wraps(command)
    def wrapper(*args, **kwargs):
        try:
            return command(*args, **kwargs)
        except PosterError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            raise SystemExit(1)

    return wrapper


def _project_file(project_path: str) -> Path:
    project_file = Path(project_path)
    if project_file.is_dir():
        project_file = project_file / "project.yaml"
    return project_file


def build_project(
    project_path: Optional[str] = None,
    rows: Optional[int] = None,
    cols: Optional[int] = None,
    orientation: Optional[str] = None,
    page: Optional[str] = None,
    pan_x: Optional[float] = None,
    pan_y: Optional[float] = None,
    zoom: Optional[float] = None,
    overlap_mm: Optional[float] = None,
    name: Optional[str] = None,
) -> PosterProject:
    """Load a project (or start from config defaults) and apply overrides."""
    config = get_config()
    if project_path:
        project = PosterProject.from_yaml(_project_file(project_path))
    else:
        project = PosterProject(
            page=config.page,
            output=OutputSettings(
                jpeg_quality=config.jpeg_quality,
                background_color=config.background_color,
            ),
        )

    data = project.model_dump()
    overrides = {
        ("grid", "rows"): rows,
        ("grid", "cols"): cols,
        ("crop", "x"): pan_x,
        ("crop", "y"): pan_y,
        ("crop", "scale"): zoom,
        ("output", "overlap_mm"): overlap_mm,
    }
    for (section, key), value in overrides.items():
        if value is not None:
            data[section][key] = value
    if orientation is not None:
        data["orientation"] = orientation
    if page is not None:
        data["page"] = get_page_size(page).model_dump()
    if name is not None:
        data["name"] = name

    updated = PosterProject(**data)
    updated.project_dir = project.project_dir
    return updated


def _build_or_exit(**kwargs) -> PosterProject:
    try:
        return build_project(**kwargs)
    except (ValidationError, ValueError, OSError) as e:
        console.print(f"[red]Invalid poster settings:[/red] {escape(str(e))}")
        raise SystemExit(1)


def _load_or_exit(image_path: str) -> Image.Image:
    try:
        return load_image(image_path)
    except (OSError, Image.DecompressionBombError) as e:
        console.print(f"[red]Could not read image:[/red] {escape(str(e))}")
        raise SystemExit(1)


def _print_summary(project: PosterProject) -> None:
    page_w, page_h = project.page_dimensions
    poster_w, poster_h = project.poster_dimensions
    console.print(f"[bold]Poster:[/bold] {project.name}")
    console.print(f"[bold]Grid:[/bold] {project.grid.rows} x {project.grid.cols} "
                  f"{project.page.name} sheets ({project.orientation.value}, {page_w:g} x {page_h:g} mm)")
    console.print(f"[bold]Assembled size:[/bold] {poster_w:g} x {poster_h:g} mm")


@click.group()
@click.version_option(version="0.1.0")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """Poster Splitter - Tile one photo across a grid of printable sheets."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("name")
@click.option("--output", "-o", type=click.Path(), help="Project directory")
@click.option("--rows", "-r", type=click.IntRange(1, 10), default=2, show_default=True)
@click.option("--cols", "-c", type=click.IntRange(1, 10), default=2, show_default=True)
@click.option("--orientation", type=click.Choice([o.value for o in Orientation]),
              default=Orientation.PORTRAIT.value, show_default=True)
@click.option("--page", type=click.Choice(sorted(PAGE_SIZES), case_sensitive=False),
              default="A4", show_default=True)
def init(name: str, output: Optional[str], rows: int, cols: int, orientation: str, page: str):
    """Initialize a new poster project."""
    output_dir = Path(output) if output else Path.cwd() / name.replace(" ", "_").lower()
    output_dir.mkdir(parents=True, exist_ok=True)

    config = get_config()
    project = PosterProject(
        name=name,
        grid=GridShape(rows=rows, cols=cols),
        orientation=Orientation(orientation),
        page=get_page_size(page),
        crop=CropSettings(),
        output=OutputSettings(
            jpeg_quality=config.jpeg_quality,
            background_color=config.background_color,
        ),
    )
    project.project_dir = output_dir

    project_file = output_dir / "project.yaml"
    project.to_yaml(project_file)
    project.ensure_directories()

    console.print(f"[green]Created project:[/green] {project_file}")
    console.print(f"[dim]Tiles will be written to:[/dim] {project.output_dir}")


@main.command()
@click.argument("image_path", type=click.Path(exists=True, dir_okay=False))
@poster_options
def window(image_path: str, project_path: Optional[str], **settings):
    """Show which part of IMAGE_PATH lands on the printed grid."""
    project = _build_or_exit(project_path=project_path, **settings)

    with _load_or_exit(image_path) as img:
        width, height = img.size

    capture = PosterService(project).resolve(width, height)
    rows, cols = project.grid.rows, project.grid.cols

    _print_summary(project)
    console.print(f"[bold]Image:[/bold] {width} x {height} px")

    table = Table(title="Capture window")
    table.add_column("sx", style="cyan")
    table.add_column("sy", style="cyan")
    table.add_column("Width", style="green")
    table.add_column("Height", style="green")
    table.add_column("Pan range", style="dim")
    table.add_row(
        f"{capture.sx:.2f}",
        f"{capture.sy:.2f}",
        f"{capture.width:.2f}",
        f"{capture.height:.2f}",
        f"{capture.max_x:.2f} x {capture.max_y:.2f}",
    )
    console.print(table)
    console.print(f"[bold]Tile size:[/bold] {capture.width / cols:.2f} x "
                  f"{capture.height / rows:.2f} px per sheet")


@main.command()
@click.argument("image_path", type=click.Path(exists=True, dir_okay=False))
@poster_options
@click.option("--output", "-o", type=click.Path(), help="Output directory")
@click.option("--pdf/--no-pdf", default=True, show_default=True, help="Write a printable PDF")
@click.option("--zip", "write_zip", is_flag=True, help="Write a ZIP of the tile images")
@click.option("--dir", "write_dir", is_flag=True, help="Write each tile as a JPEG file")
@click.option("--workers", "-w", type=click.IntRange(1, 64), help="Rasterization threads")
def split(
    image_path: str,
    project_path: Optional[str],
    output: Optional[str],
    pdf: bool,
    write_zip: bool,
    write_dir: bool,
    workers: Optional[int],
    **settings,
):
    """Split IMAGE_PATH into printable poster tiles."""
    project = _build_or_exit(project_path=project_path, **settings)
    config = get_config()

    if output:
        output_dir = Path(output)
    elif project.project_dir is not None:
        output_dir = project.output_dir
    else:
        output_dir = config.output_dir

    if not (pdf or write_zip or write_dir):
        console.print("[yellow]Nothing to write:[/yellow] enable --pdf, --zip or --dir")
        raise SystemExit(1)

    _print_summary(project)

    image = _load_or_exit(image_path)
    service = PosterService(project, max_workers=workers or config.max_workers)
    total = project.grid.tile_count

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Rasterizing tiles...", total=total)
        result = service.split(
            image,
            progress_callback=lambda done, _total: progress.update(task, completed=done),
        )
        progress.update(task, description="[green]Tiles rasterized")

    tile_w, tile_h = result.tile_size
    console.print(f"[bold]Capture window:[/bold] {result.window}")
    console.print(f"[bold]Tiles:[/bold] {len(result.tiles)} at {tile_w} x {tile_h} px")

    exporter = ExportService(page=project.page, orientation=project.orientation)
    base_name = project.name.replace(" ", "_")
    if pdf:
        path = exporter.save_pdf(result.tiles, output_dir / timestamped_filename(base_name, "pdf"),
                                 title=project.name)
        console.print(f"[green]Saved:[/green] {path}")
    if write_zip:
        path = exporter.save_zip(result.tiles, output_dir / timestamped_filename(base_name, "zip"))
        console.print(f"[green]Saved:[/green] {path}")
    if write_dir:
        paths = exporter.save_directory(result.tiles, output_dir / f"{base_name}_tiles")
        console.print(f"[green]Saved:[/green] {len(paths)} tiles to {paths[0].parent}")

    console.print("[dim]Print at 100% / actual size so sheets line up.[/dim]")


if __name__ == "__main__":
    main()
