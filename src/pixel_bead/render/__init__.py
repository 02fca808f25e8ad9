"""Renderers for previewing boards."""

from pixel_bead.render.terminal import TerminalRenderer

__all__ = ["TerminalRenderer"]
