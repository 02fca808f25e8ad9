"""I/O module for project files and image export."""

from pixel_bead.io.project import Project, load_project, save_project
from pixel_bead.io.image_export import render_png, save_png

__all__ = ["Project", "load_project", "save_project", "render_png", "save_png"]
