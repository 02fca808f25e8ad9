"""Typer CLI application for bead boards."""

import json
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from pixel_bead.config import BoardConfig
from pixel_bead.core.constants import clamp_dimension
from pixel_bead.core.grid import Edge, GridSettings
from pixel_bead.core.palette import Palette
from pixel_bead.edit.engine import BoardEngine
from pixel_bead.errors import PixelBeadError, ValidationFailure
from pixel_bead.io.image_export import save_png
from pixel_bead.io.project import load_project, save_project
from pixel_bead.render.terminal import TerminalRenderer


def configure_logging(level: str) -> None:
    """Send loguru output to stderr at the given level."""
    logger.remove()  # Remove default handler
    logger.add(sys.stderr, level=level, format="{time:HH:mm:ss} {level} {message}")


def create_app() -> typer.Typer:
    """Create and configure the CLI application."""
    app = typer.Typer(
        name="pixel-bead",
        help="Turn images into bead board patterns and edit them.",
        no_args_is_help=True,
        rich_markup_mode="rich",
    )
    console = Console()
    state: dict[str, BoardConfig] = {}

    def fail(message: str) -> typer.Exit:
        console.print(f"[red]{message}[/]")
        return typer.Exit(1)

    def open_board(path: Path) -> BoardEngine:
        try:
            return BoardEngine.from_project(load_project(path), state["config"])
        except PixelBeadError as exc:
            raise fail(str(exc)) from exc

    def write_board(engine: BoardEngine, path: Path) -> None:
        try:
            save_project(engine.to_project(), path)
        except PixelBeadError as exc:
            raise fail(str(exc)) from exc
        console.print(f"[green]Saved {engine.width}x{engine.height} board → {path}[/]")

    @app.callback()
    def main(
        verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
    ) -> None:
        try:
            config = BoardConfig.from_env()
        except ValueError as exc:
            raise fail(str(exc)) from exc
        state["config"] = config
        configure_logging("DEBUG" if verbose else config.log_level)

    @app.command()
    def convert(
        image: Annotated[Path, typer.Argument(help="Source image (PNG, JPG, GIF, ...)")],
        output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Project file (default: image name + .json)")] = None,
        width: Annotated[Optional[int], typer.Option("--width", "-w", help="Board width in beads")] = None,
        height: Annotated[Optional[int], typer.Option("--height", "-H", help="Board height (only without aspect lock)")] = None,
        no_lock: Annotated[bool, typer.Option("--no-lock", help="Do not derive height from the image aspect")] = False,
        palette_file: Annotated[Optional[Path], typer.Option("--palette", "-p", help="Take the palette from this project file")] = None,
        png: Annotated[Optional[Path], typer.Option("--png", help="Also export a pattern PNG")] = None,
    ) -> None:
        """Quantize an image onto the bead palette and save a project."""
        config = state["config"]
        palette = Palette.default()
        if palette_file is not None:
            try:
                palette = load_project(palette_file).palette
            except PixelBeadError as exc:
                raise fail(str(exc)) from exc

        if height is not None and not no_lock:
            console.print("[yellow]--height is ignored while the aspect ratio is locked (add --no-lock)[/]")
        settings = GridSettings(
            config.default_width,
            clamp_dimension(height) if height is not None and no_lock else config.default_height,
            lock_aspect_ratio=not no_lock,
        )
        try:
            engine = BoardEngine(palette, settings, config)
        except PixelBeadError as exc:
            raise fail(str(exc)) from exc

        with engine:
            try:
                engine.load_image(image, width)
            except PixelBeadError as exc:
                raise fail(str(exc)) from exc

            write_board(engine, output or image.with_suffix(".json"))
            if png is not None:
                save_png(engine.grid, png, config.export_cell_size)
                console.print(f"[green]Exported pattern → {png}[/]")

    @app.command()
    def show(
        project: Annotated[Path, typer.Argument(help="Project file")],
        full: Annotated[bool, typer.Option("--full", help="One bead per two characters instead of half blocks")] = False,
    ) -> None:
        """Preview a board in the terminal."""
        engine = open_board(project)
        print(TerminalRenderer(half_blocks=not full).render(engine.grid))
        summary = engine.stats()
        console.print(f"[bold]{engine.width}x{engine.height}[/] · {summary.total} beads · {len(summary)} colors")

    @app.command()
    def stats(
        project: Annotated[Path, typer.Argument(help="Project file")],
        json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
    ) -> None:
        """Show bead counts per color."""
        engine = open_board(project)
        result = engine.stats()

        if json_output:
            print(json.dumps(result.to_dict(), indent=2))
            return

        table = Table(title=f"{project.name}: {result.total} beads")
        table.add_column("Color")
        table.add_column("Name")
        table.add_column("Count", justify="right")
        table.add_column("%", justify="right")
        for stat in result.colors:
            table.add_row(f"[{stat.color}]██[/] {stat.color}", stat.name, str(stat.count), f"{stat.percentage:.1f}")
        console.print(table)

    @app.command()
    def merge(
        project: Annotated[Path, typer.Argument(help="Project file")],
        threshold: Annotated[Optional[float], typer.Option("--threshold", "-t", help="Share below which a color is rare (0-1)")] = None,
        output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Output path (default: overwrite)")] = None,
    ) -> None:
        """Fold rare colors into their nearest common color."""
        engine = open_board(project)
        plan = engine.merge_rare_colors(threshold)
        if plan.is_empty:
            console.print(f"[yellow]{plan.message}[/]")
            return

        for old, new in plan.mapping.items():
            console.print(f"  [{old}]██[/] {old} → [{new}]██[/] {new}")
        console.print(plan.message)
        write_board(engine, output or project)

    @app.command()
    def resize(
        project: Annotated[Path, typer.Argument(help="Project file")],
        width: Annotated[int, typer.Argument(help="New width in beads")],
        height: Annotated[int, typer.Argument(help="New height in beads")],
        output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Output path (default: overwrite)")] = None,
    ) -> None:
        """Crop or pad a board (anchored top-left)."""
        engine = open_board(project)
        engine.resize(width, height)
        write_board(engine, output or project)

    @app.command()
    def edge(
        project: Annotated[Path, typer.Argument(help="Project file")],
        direction: Annotated[Edge, typer.Argument(help="Which edge")],
        action: Annotated[str, typer.Argument(help="add or remove")],
        output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Output path (default: overwrite)")] = None,
    ) -> None:
        """Insert or remove a row/column at one edge."""
        if action not in ("add", "remove"):
            raise fail(f"Unknown action: {action} (use add or remove)")
        engine = open_board(project)
        try:
            changed = engine.insert_edge(direction, strict=True) if action == "add" else engine.remove_edge(direction)
        except ValidationFailure as exc:
            raise fail(str(exc)) from exc
        if changed:
            write_board(engine, output or project)

    @app.command()
    def paint(
        project: Annotated[Path, typer.Argument(help="Project file")],
        x: Annotated[int, typer.Argument(help="Column")],
        y: Annotated[int, typer.Argument(help="Row")],
        color: Annotated[str, typer.Argument(help="Bead color, #RRGGBB")],
        fill: Annotated[bool, typer.Option("--fill", "-f", help="Recolor every bead matching the one at (x, y)")] = False,
        output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Output path (default: overwrite)")] = None,
    ) -> None:
        """Paint one bead, or swap a color across the board with --fill."""
        engine = open_board(project)
        try:
            changed = engine.flood_fill(x, y, color) if fill else engine.set_cell(x, y, color)
        except ValidationFailure as exc:
            raise fail(str(exc)) from exc
        if not changed:
            console.print("[dim]Nothing changed[/]")
            return
        write_board(engine, output or project)

    @app.command()
    def export(
        project: Annotated[Path, typer.Argument(help="Project file")],
        dest: Annotated[Path, typer.Argument(help="PNG file to write")],
        cell_size: Annotated[Optional[int], typer.Option("--cell-size", help="Pixels per bead")] = None,
    ) -> None:
        """Export a board as a PNG pattern."""
        engine = open_board(project)
        try:
            save_png(engine.grid, dest, cell_size or state["config"].export_cell_size)
        except PixelBeadError as exc:
            raise fail(str(exc)) from exc
        console.print(f"[green]Exported {project} → {dest}[/]")

    @app.command()
    def palette() -> None:
        """List the default bead palette."""
        table = Table(title="Default palette")
        table.add_column("Id")
        table.add_column("Name")
        table.add_column("Color")
        for entry in Palette.default():
            table.add_row(entry.id, entry.label, f"[{entry.color}]██[/] {entry.color}")
        console.print(table)

    return app
