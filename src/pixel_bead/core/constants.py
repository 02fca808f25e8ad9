"""Shared constants for bead board processing."""

# Grid bounds (beads per side)
MIN_GRID_SIZE = 5
MAX_GRID_SIZE = 100

# Board created at startup
DEFAULT_WIDTH = 15
DEFAULT_HEIGHT = 15

# Every cell holds a color; there is no empty bead
WHITE = "#FFFFFF"

# Undo/redo window
HISTORY_LIMIT = 30

# Share of the board below which a color counts as rare
MERGE_THRESHOLD = 0.03

# PNG export magnification (pixels per bead)
EXPORT_CELL_SIZE = 20

# Project file format
PROJECT_VERSION = "1.1"

# Bobbin bead set: (id, hex, name)
DEFAULT_PALETTE_COLORS: tuple[tuple[str, str, str], ...] = (
    ("yellow1", "#F5DC4B", "0"),
    ("red1", "#EE4256", "1"),
    ("orange1", "#F68643", "2"),
    ("green1", "#36BF38", "3"),
    ("blue1", "#89DA18", "4"),
    ("brown1", "#C35536", "5"),
    ("blue2", "#26B7F5", "6"),
    ("blue3", "#3B61F4", "7"),
    ("pink1", "#F265F2", "8"),
    ("purple1", "#975CF6", "9"),
    ("pink2", "#F293E2", "10"),
    ("blue4", "#AA90F7", "11"),
    ("brown2", "#F3BE9E", "12"),
    ("blue5", "#20DFEC", "13"),
    ("orange2", "#F1A714", "14"),
    ("green2", "#28D69F", "15"),
    ("gray1", "#677E96", "16"),
    ("white1", "#B9C0CD", "17"),
    ("black1", "#5F5F61", "18"),
)


def clamp_dimension(value: int) -> int:
    """Clamp a grid dimension into [MIN_GRID_SIZE, MAX_GRID_SIZE]."""
    return max(MIN_GRID_SIZE, min(MAX_GRID_SIZE, int(value)))
