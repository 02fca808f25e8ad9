"""Shared fixtures: small palettes, boards and in-memory images."""

import io
from pathlib import Path

import pytest
from PIL import Image

from pixel_bead.core.grid import Grid, GridSettings
from pixel_bead.core.palette import Palette
from pixel_bead.edit.engine import BoardEngine
from pixel_bead.io.project import Project, save_project

RED = "#FF0000"
GREEN = "#00FF00"
BLUE = "#0000FF"
WHITE = "#FFFFFF"
BLACK = "#000000"


@pytest.fixture
def rgb_palette() -> Palette:
    """Primary colors plus black and white."""
    return Palette.from_colors([RED, GREEN, BLUE, WHITE, BLACK])


@pytest.fixture
def engine(rgb_palette: Palette):
    """A blank 5x5 board on the primary palette."""
    board = BoardEngine(rgb_palette, GridSettings(5, 5))
    yield board
    board.close()


@pytest.fixture
def split_image() -> Image.Image:
    """20x10 image, left half red, right half blue."""
    img = Image.new("RGB", (20, 10), (0, 0, 255))
    img.paste((255, 0, 0), (0, 0, 10, 10))
    return img


@pytest.fixture
def square_image() -> Image.Image:
    """10x10 solid green."""
    return Image.new("RGB", (10, 10), (0, 255, 0))


@pytest.fixture
def png_bytes(split_image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    split_image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def checker_grid() -> Grid:
    """6x5 board of alternating red and blue beads."""
    return Grid.from_rows(
        [[RED if (x + y) % 2 == 0 else BLUE for x in range(6)] for y in range(5)]
    )


@pytest.fixture
def project_file(tmp_path: Path, checker_grid: Grid, rgb_palette: Palette) -> Path:
    """A saved 6x5 checkerboard project."""
    path = tmp_path / "board.json"
    project = Project(grid=checker_grid, settings=GridSettings(6, 5), palette=rgb_palette)
    save_project(project, path)
    return path
