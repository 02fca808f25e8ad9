"""Palette - the ordered set of bead colors a board may use."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

from pixel_bead.core.color import normalize_hex
from pixel_bead.core.constants import DEFAULT_PALETTE_COLORS
from pixel_bead.errors import InvalidColorError


@dataclass(frozen=True, slots=True)
class PaletteEntry:
    """
    One bead color in a palette.

    The color is stored in canonical ``#RRGGBB`` form when it decodes;
    an undecodable value is kept verbatim so it round-trips through
    project files, and the quantizer simply never selects it.
    """
    id: str
    color: str
    name: str | None = None

    def __post_init__(self) -> None:
        canonical = normalize_hex(self.color)
        if canonical is not None and canonical != self.color:
            object.__setattr__(self, "color", canonical)

    @property
    def label(self) -> str:
        """Display name, falling back to the hex code."""
        return self.name or self.color

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "hex": self.color}
        if self.name is not None:
            data["name"] = self.name
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PaletteEntry:
        color = data.get("hex", data.get("color", ""))
        return cls(
            id=str(data.get("id", color)),
            color=str(color),
            name=data.get("name"),
        )


@dataclass
class Palette:
    """
    Ordered sequence of PaletteEntry.

    Order only matters for tie-breaking in the quantizer. Duplicate
    colors are tolerated when a palette is built wholesale; ``add``
    refuses them, the way the palette editor does.
    """
    entries: list[PaletteEntry] = field(default_factory=list)

    @classmethod
    def default(cls) -> Palette:
        """The bobbin bead set shipped with the application."""
        return cls([PaletteEntry(entry_id, hex_code, name) for entry_id, hex_code, name in DEFAULT_PALETTE_COLORS])

    @classmethod
    def from_colors(cls, colors: Iterable[str]) -> Palette:
        """Build a palette from bare hex codes (ids are the codes)."""
        return cls([PaletteEntry(id=c, color=c) for c in colors])

    @classmethod
    def from_dicts(cls, items: Iterable[dict[str, Any]]) -> Palette:
        return cls([PaletteEntry.from_dict(item) for item in items])

    def to_dicts(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self.entries]

    def __iter__(self) -> Iterator[PaletteEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, color: object) -> bool:
        return isinstance(color, str) and self.find(color) is not None

    @property
    def colors(self) -> list[str]:
        return [entry.color for entry in self.entries]

    def find(self, color: str) -> PaletteEntry | None:
        """First entry whose color matches (case-insensitive)."""
        wanted = normalize_hex(color) or color.upper()
        for entry in self.entries:
            if entry.color.upper() == wanted:
                return entry
        return None

    def add(self, color: str, name: str = "Custom") -> PaletteEntry | None:
        """Append a color with a fresh id; returns None if already present."""
        canonical = normalize_hex(color)
        if canonical is None:
            raise InvalidColorError(f"Not a #RRGGBB color: {color!r}")
        if self.find(canonical) is not None:
            return None
        entry = PaletteEntry(id=str(uuid.uuid4()), color=canonical, name=name)
        self.entries.append(entry)
        return entry

    def remove(self, entry_id: str) -> PaletteEntry | None:
        """Remove the entry with this id; returns it, or None if absent."""
        for index, entry in enumerate(self.entries):
            if entry.id == entry_id:
                return self.entries.pop(index)
        return None

    def reset(self) -> None:
        """Restore the default bead set."""
        self.entries = Palette.default().entries

    def copy(self) -> Palette:
        return Palette(list(self.entries))
