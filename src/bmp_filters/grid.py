"""In-memory pixel grid shared by the codec and the transform library."""

from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class Pixel:
    """
    One RGB pixel.

    Channels decoded from disk are always 0-255. Transforms do not clamp,
    so a pixel produced by a transform may hold values outside that range;
    the encoder keeps only the low 8 bits of each channel.
    """
    red: int
    green: int
    blue: int


# Row-major, top row first. A grid with zero rows means "not a valid image".
Grid = List[List[Pixel]]

BLACK = Pixel(0, 0, 0)
WHITE = Pixel(255, 255, 255)
RED = Pixel(255, 0, 0)
GREEN = Pixel(0, 255, 0)
BLUE = Pixel(0, 0, 255)


def grid_size(grid: Grid) -> Tuple[int, int]:
    """Return (height, width); (0, 0) for an empty grid."""
    if not grid:
        return 0, 0
    return len(grid), len(grid[0])


def is_empty(grid: Grid) -> bool:
    return len(grid) == 0


def new_grid(height: int, width: int, fill: Pixel = BLACK) -> Grid:
    # Fresh list per row; rows must never alias each other.
    return [[fill] * width for _ in range(height)]
