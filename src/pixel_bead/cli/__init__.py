"""Command-line interface for pixel-bead."""
