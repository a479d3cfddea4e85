"""
Centralized parsing and validation of filter parameters and filenames.

The transform library never checks its inputs; the CLI and the interactive
menu must pass every user-supplied value through these helpers first.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from bmp_filters.transforms import (
    TRANSFORM_PARAMS,
    Transform,
    parse_transform as _parse_transform_core,
)

# Exclusive bounds for lighten/darken/clarendon factors.
SCALE_MIN = 0.0
SCALE_MAX = 1.0

ROTATIONS_MIN = 1
ROTATIONS_MAX = 100

ENLARGE_MIN = 2
ENLARGE_MAX = 5

BMP_SUFFIX = ".bmp"

Number = Union[str, int, float]


def parse_scale(value: Number) -> float:
    """
    Parse a scale factor strictly between 0 and 1.

    Raises:
        ValueError: If value is not a number or is out of range.
    """
    try:
        scale = float(value)
    except (TypeError, ValueError):
        raise ValueError(
            f"Invalid scale '{value}'. Enter a decimal value between 0 and 1."
        )

    if not SCALE_MIN < scale < SCALE_MAX:
        raise ValueError(
            f"Scale {value} out of range. Enter a decimal value between 0 and 1."
        )
    return scale


def _parse_whole_number(value: Number, low: int, high: int, label: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid {label} '{value}'.")
    if isinstance(value, int):
        number = value
    else:
        try:
            number = int(str(value).strip())
        except ValueError:
            raise ValueError(
                f"Invalid {label} '{value}'. Enter a whole number between {low} and {high}."
            )

    if not low <= number <= high:
        raise ValueError(
            f"{label.capitalize()} {number} out of range. "
            f"Enter a whole number between {low} and {high}."
        )
    return number


def parse_rotations(value: Number) -> int:
    """Parse a clockwise quarter-turn count between 1 and 100."""
    return _parse_whole_number(value, ROTATIONS_MIN, ROTATIONS_MAX, "rotation count")


def parse_enlarge_factor(value: Number) -> int:
    """Parse an enlarge factor between 2 and 5."""
    return _parse_whole_number(value, ENLARGE_MIN, ENLARGE_MAX, "enlarge factor")


def validate_bmp_filename(name: str, source: Optional[str] = None) -> str:
    """
    Check that ``name`` is a .bmp filename distinct from ``source``.

    Returns:
        The stripped filename.

    Raises:
        ValueError: If the suffix is wrong or the name equals the source.
    """
    name = name.strip()
    if not name.endswith(BMP_SUFFIX):
        raise ValueError(f"Invalid filename '{name}'. Enter a name that ends in {BMP_SUFFIX}.")

    if source is not None and Path(name) == Path(source.strip()):
        raise ValueError(f"'{name}' is the source image. Enter a new name that ends in {BMP_SUFFIX}.")
    return name


def parse_transform(value: str) -> Transform:
    """
    Parse a filter name.

    Wraps the parser from the transform library so both front ends share it.

    Raises:
        ValueError: If the filter is not recognized.
    """
    return _parse_transform_core(value)


def build_params(
    transform: Transform,
    scale: Optional[Number] = None,
    rotations: Optional[Number] = None,
    xscale: Optional[Number] = None,
    yscale: Optional[Number] = None,
) -> Dict[str, Any]:
    """
    Validate the raw options a filter needs and return its keyword arguments.

    Options the filter does not use are ignored.

    Raises:
        ValueError: If a required option is missing or invalid.
    """
    required = TRANSFORM_PARAMS[transform]
    params: Dict[str, Any] = {}

    if "scale" in required:
        if scale is None:
            raise ValueError(f"Filter '{transform.value}' requires a scale between 0 and 1")
        params["scale"] = parse_scale(scale)

    if "count" in required:
        if rotations is None:
            raise ValueError(
                f"Filter '{transform.value}' requires a rotation count between "
                f"{ROTATIONS_MIN} and {ROTATIONS_MAX}"
            )
        params["count"] = parse_rotations(rotations)

    if "xscale" in required:
        if xscale is None or yscale is None:
            raise ValueError(
                f"Filter '{transform.value}' requires xscale and yscale between "
                f"{ENLARGE_MIN} and {ENLARGE_MAX}"
            )
        params["xscale"] = parse_enlarge_factor(xscale)
        params["yscale"] = parse_enlarge_factor(yscale)

    return params
