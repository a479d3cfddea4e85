"""
Pixel and geometry transforms for decoded bitmaps.

Every transform takes a Grid and returns a new Grid; the input is never
modified. Channel arithmetic truncates toward zero and is not clamped, so
scaling filters can yield values outside 0-255 (the encoder wraps them to
8 bits). Parameter ranges are the caller's responsibility.
"""

import logging
import math
from enum import Enum
from typing import Dict, Tuple

from .grid import BLACK, BLUE, GREEN, RED, WHITE, Grid, Pixel, grid_size, new_grid

logger = logging.getLogger(__name__)


class TransformError(ValueError):
    """Raised when a transform is dispatched without its parameters."""


def _scale_down(value: int, scale: float) -> int:
    return int(value * scale)


def _scale_up(value: int, scale: float) -> int:
    return int(255 - (255 - value) * scale)


def vignette(grid: Grid) -> Grid:
    """Darken pixels in proportion to their distance from the center."""
    height, width = grid_size(grid)
    center_col = width // 2
    center_row = height // 2
    result = []
    for row, pixels in enumerate(grid):
        new_row = []
        for col, p in enumerate(pixels):
            distance = math.sqrt((col - center_col) ** 2 + (row - center_row) ** 2)
            factor = (height - distance) / height
            new_row.append(Pixel(
                _scale_down(p.red, factor),
                _scale_down(p.green, factor),
                _scale_down(p.blue, factor),
            ))
        result.append(new_row)
    return result


def clarendon(grid: Grid, scale: float) -> Grid:
    """Push light pixels lighter and dark pixels darker; mid tones are kept."""
    result = []
    for pixels in grid:
        new_row = []
        for p in pixels:
            average = (p.red + p.green + p.blue) // 3
            if average >= 170:
                p = Pixel(
                    _scale_up(p.red, scale),
                    _scale_up(p.green, scale),
                    _scale_up(p.blue, scale),
                )
            elif average < 90:
                p = Pixel(
                    _scale_down(p.red, scale),
                    _scale_down(p.green, scale),
                    _scale_down(p.blue, scale),
                )
            new_row.append(p)
        result.append(new_row)
    return result


def grayscale(grid: Grid) -> Grid:
    result = []
    for pixels in grid:
        new_row = []
        for p in pixels:
            gray = (p.red + p.green + p.blue) // 3
            new_row.append(Pixel(gray, gray, gray))
        result.append(new_row)
    return result


def rotate_90(grid: Grid) -> Grid:
    """Rotate clockwise by 90 degrees; output is width rows of height pixels."""
    height, width = grid_size(grid)
    result = new_grid(width, height)
    for row in range(height):
        for col in range(width):
            result[col][height - 1 - row] = grid[row][col]
    return result


def rotate_180(grid: Grid) -> Grid:
    height, width = grid_size(grid)
    result = new_grid(height, width)
    for row in range(height):
        for col in range(width):
            result[height - 1 - row][width - 1 - col] = grid[row][col]
    return result


def rotate_270(grid: Grid) -> Grid:
    """
    Rotate clockwise by 270 degrees (90 counter-clockwise).

    Kept bit-compatible with the legacy filter, which places input
    ``[row][col]`` at output ``[col][row]``.
    """
    height, width = grid_size(grid)
    result = new_grid(width, height)
    for row in range(height):
        for col in range(width):
            result[col][row] = grid[row][col]
    return result


def rotate_quarter_turns(grid: Grid, count: int) -> Grid:
    """Rotate clockwise by ``count`` quarter turns (any sign)."""
    angle = count * 90
    if angle % 90 != 0:
        # Unreachable for integer counts.
        logger.warning("Angle needs to be divisible by 90")
        return grid

    angle %= 360
    if angle == 0:
        return [list(row) for row in grid]
    if angle == 90:
        return rotate_90(grid)
    if angle == 180:
        return rotate_180(grid)
    return rotate_270(grid)


def enlarge(grid: Grid, xscale: int, yscale: int) -> Grid:
    """Nearest-neighbour upscale; each pixel becomes an xscale x yscale block."""
    height, width = grid_size(grid)
    return [
        [grid[row // yscale][col // xscale] for col in range(width * xscale)]
        for row in range(height * yscale)
    ]


def high_contrast(grid: Grid) -> Grid:
    threshold = 255 // 2
    result = []
    for pixels in grid:
        new_row = []
        for p in pixels:
            gray = (p.red + p.green + p.blue) // 3
            new_row.append(WHITE if gray >= threshold else BLACK)
        result.append(new_row)
    return result


def lighten(grid: Grid, scale: float) -> Grid:
    return [
        [Pixel(_scale_up(p.red, scale), _scale_up(p.green, scale), _scale_up(p.blue, scale))
         for p in pixels]
        for pixels in grid
    ]


def darken(grid: Grid, scale: float) -> Grid:
    return [
        [Pixel(_scale_down(p.red, scale), _scale_down(p.green, scale), _scale_down(p.blue, scale))
         for p in pixels]
        for pixels in grid
    ]


def _primary(p: Pixel) -> Pixel:
    total = p.red + p.green + p.blue
    if total >= 550:
        return WHITE
    if total <= 150:
        return BLACK
    brightest = max(p.red, p.green, p.blue)
    # Ties resolve red, then green, then blue.
    if brightest == p.red:
        return RED
    if brightest == p.green:
        return GREEN
    return BLUE


def posterize(grid: Grid) -> Grid:
    """Reduce every pixel to black, white, red, green or blue."""
    return [[_primary(p) for p in pixels] for pixels in grid]


def clamp_channels(grid: Grid) -> Grid:
    """Clamp every channel into 0-255 instead of letting the encoder wrap it."""
    def clamp(value: int) -> int:
        return min(255, max(0, value))

    return [
        [Pixel(clamp(p.red), clamp(p.green), clamp(p.blue)) for p in pixels]
        for pixels in grid
    ]


class Transform(Enum):
    """Available filters."""
    VIGNETTE = "vignette"
    CLARENDON = "clarendon"
    GRAYSCALE = "grayscale"
    ROTATE_90 = "rotate_90"
    ROTATE_180 = "rotate_180"
    ROTATE_270 = "rotate_270"
    ROTATE = "rotate"
    ENLARGE = "enlarge"
    HIGH_CONTRAST = "high_contrast"
    LIGHTEN = "lighten"
    DARKEN = "darken"
    POSTERIZE = "posterize"


# Letters from the legacy interactive menu (A is "change image", Q quits).
MENU_LETTERS: Dict[str, Transform] = {
    "B": Transform.VIGNETTE,
    "C": Transform.CLARENDON,
    "D": Transform.GRAYSCALE,
    "E": Transform.ROTATE_90,
    "F": Transform.ROTATE,
    "G": Transform.ENLARGE,
    "H": Transform.HIGH_CONTRAST,
    "I": Transform.LIGHTEN,
    "J": Transform.DARKEN,
    "K": Transform.POSTERIZE,
}

MENU_LABELS: Dict[Transform, str] = {
    Transform.VIGNETTE: "Vignette",
    Transform.CLARENDON: "Clarendon",
    Transform.GRAYSCALE: "Grayscale",
    Transform.ROTATE_90: "Rotate 90 degrees",
    Transform.ROTATE_180: "Rotate 180 degrees",
    Transform.ROTATE_270: "Rotate 270 degrees",
    Transform.ROTATE: "Rotate 90 degree increment of choice",
    Transform.ENLARGE: "Enlarge by scale of choice",
    Transform.HIGH_CONTRAST: "High contrast",
    Transform.LIGHTEN: "Lighten",
    Transform.DARKEN: "Darken",
    Transform.POSTERIZE: "Black, white, red, green and blue only",
}

# Maps normalized strings to Transform members
TRANSFORM_ALIASES: Dict[str, Transform] = {t.value: t for t in Transform}
TRANSFORM_ALIASES.update({
    "gray": Transform.GRAYSCALE,
    "greyscale": Transform.GRAYSCALE,
    "rotate90": Transform.ROTATE_90,
    "rotate180": Transform.ROTATE_180,
    "rotate270": Transform.ROTATE_270,
    "rotate_ccw": Transform.ROTATE_270,
    "contrast": Transform.HIGH_CONTRAST,
    "primaries": Transform.POSTERIZE,
})
TRANSFORM_ALIASES.update({letter.lower(): t for letter, t in MENU_LETTERS.items()})

TRANSFORM_PARAMS: Dict[Transform, Tuple[str, ...]] = {
    Transform.VIGNETTE: (),
    Transform.CLARENDON: ("scale",),
    Transform.GRAYSCALE: (),
    Transform.ROTATE_90: (),
    Transform.ROTATE_180: (),
    Transform.ROTATE_270: (),
    Transform.ROTATE: ("count",),
    Transform.ENLARGE: ("xscale", "yscale"),
    Transform.HIGH_CONTRAST: (),
    Transform.LIGHTEN: ("scale",),
    Transform.DARKEN: ("scale",),
    Transform.POSTERIZE: (),
}

_FUNCTIONS = {
    Transform.VIGNETTE: vignette,
    Transform.CLARENDON: clarendon,
    Transform.GRAYSCALE: grayscale,
    Transform.ROTATE_90: rotate_90,
    Transform.ROTATE_180: rotate_180,
    Transform.ROTATE_270: rotate_270,
    Transform.ROTATE: rotate_quarter_turns,
    Transform.ENLARGE: enlarge,
    Transform.HIGH_CONTRAST: high_contrast,
    Transform.LIGHTEN: lighten,
    Transform.DARKEN: darken,
    Transform.POSTERIZE: posterize,
}


def parse_transform(value: str) -> Transform:
    """
    Parse a transform from a user-supplied name.

    Accepts enum values ("high_contrast"), hyphenated forms
    ("high-contrast"), a few short aliases and the legacy menu letters B-K.

    Raises:
        ValueError: If the name is not recognized.
    """
    normalized = value.lower().strip().replace("-", "_")

    if normalized in TRANSFORM_ALIASES:
        return TRANSFORM_ALIASES[normalized]

    valid = ", ".join(t.value for t in Transform)
    raise ValueError(f"Unknown filter '{value}'. Valid filters: {valid}")


def apply_transform(transform: Transform, grid: Grid, **params) -> Grid:
    """Run ``transform`` on ``grid`` with the keyword parameters it needs."""
    required = TRANSFORM_PARAMS[transform]
    missing = [name for name in required if params.get(name) is None]
    if missing:
        raise TransformError(
            f"{transform.value} requires: {', '.join(missing)}"
        )

    height, width = grid_size(grid)
    logger.debug(f"Applying {transform.value} to {width}x{height} grid")
    return _FUNCTIONS[transform](grid, **{name: params[name] for name in required})
