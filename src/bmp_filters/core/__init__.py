"""
Core workflow module for bmp-filters.

This module provides the single source of truth for:
- Parameter and filename validation (parsing.py)
- Result objects (results.py)
- Decode/filter/encode workflows (actions.py)

Both the command line and the interactive menu call into this module
rather than driving the codec and transforms directly.
"""

from .parsing import (
    parse_scale,
    parse_rotations,
    parse_enlarge_factor,
    parse_transform,
    validate_bmp_filename,
    build_params,
)
from .results import OperationResult
from .actions import run_filter, inspect_bitmap

__all__ = [
    # Parsing
    "parse_scale",
    "parse_rotations",
    "parse_enlarge_factor",
    "parse_transform",
    "validate_bmp_filename",
    "build_params",
    # Results
    "OperationResult",
    # Actions
    "run_filter",
    "inspect_bitmap",
]
