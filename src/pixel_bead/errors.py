"""Exception taxonomy for pixel-bead.

ValidationFailure subclasses describe a request the board refused; the
message is meant for the user and no state was changed. IOFailure
subclasses come from the file boundary (import, decode, export).
"""

from __future__ import annotations


class PixelBeadError(Exception):
    """Base class for all pixel-bead errors."""


class ValidationFailure(PixelBeadError):
    """A request was rejected; board state is unchanged."""


class GridSizeError(ValidationFailure):
    """An edit would take the grid outside the allowed dimensions."""

    def __init__(self, message: str, width: int, height: int) -> None:
        super().__init__(message)
        self.width = width
        self.height = height


class InvalidColorError(ValidationFailure, ValueError):
    """A color argument is not a ``#RRGGBB`` value."""


class ProjectFormatError(ValidationFailure):
    """A project file parsed but is missing required sections."""


class IOFailure(PixelBeadError):
    """Reading or writing a file failed; nothing was applied."""


class ProjectReadError(IOFailure):
    """A project file could not be read or parsed."""


class ImageDecodeError(IOFailure):
    """A source image could not be decoded."""


class ExportError(IOFailure):
    """Serializing or writing an export failed."""
