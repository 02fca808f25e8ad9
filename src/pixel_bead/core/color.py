"""Color representation and distance for bead palettes.

Colors travel through the package as canonical ``#RRGGBB`` strings
(uppercase). ``Rgb`` is the numeric form used only for comparisons.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

HEX_PATTERN = re.compile(r'^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$', re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class Rgb:
    """A decoded 24-bit color."""
    r: int
    g: int
    b: int

    def to_hex(self) -> str:
        return rgb_to_hex(self.r, self.g, self.b)

    def distance(self, other: Rgb) -> int:
        """Squared Euclidean distance to another color.

        The square root is never taken: the value only ever orders
        candidates, and the squared form orders them identically.
        """
        return (
            (self.r - other.r) ** 2
            + (self.g - other.g) ** 2
            + (self.b - other.b) ** 2
        )


def hex_to_rgb(color: str) -> Rgb | None:
    """Decode ``#RRGGBB`` (``#`` optional, any case).

    Returns None when the string is not a 6-digit hex color; callers
    treat that as "cannot compare" and keep the value as-is.
    """
    if not isinstance(color, str):
        return None
    match = HEX_PATTERN.match(color.strip())
    if not match:
        return None
    return Rgb(
        int(match.group(1), 16),
        int(match.group(2), 16),
        int(match.group(3), 16),
    )


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Encode channels as canonical uppercase ``#RRGGBB``."""
    return f"#{r:02X}{g:02X}{b:02X}"


def normalize_hex(color: str) -> str | None:
    """Return the canonical form of a color string, or None if invalid."""
    rgb = hex_to_rgb(color)
    return rgb.to_hex() if rgb else None


def color_distance(c1: str, c2: str) -> int | None:
    """Squared distance between two color strings (None if either fails to decode)."""
    a = hex_to_rgb(c1)
    b = hex_to_rgb(c2)
    if a is None or b is None:
        return None
    return a.distance(b)
