"""
Core workflow actions for bmp-filters.

Each action runs one complete decode -> transform -> encode job (or a
read-only inspection) and reports through an OperationResult instead of
raising, so the CLI and the interactive menu share one code path.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Optional, Union

from bmp_filters import bmp_codec
from bmp_filters.grid import grid_size, is_empty
from bmp_filters.transforms import (
    Transform,
    TransformError,
    apply_transform,
    clamp_channels,
)

from .results import OperationResult

logger = logging.getLogger(__name__)


class _ListLogHandler(logging.Handler):
    """Capture log records into a list of formatted strings."""

    def __init__(self, level: int = logging.INFO) -> None:
        super().__init__(level)
        self.records = []
        self.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(self.format(record))


@contextmanager
def _capture_logs(logger_name: str = "bmp_filters"):
    """Capture logs for core operations into a list."""
    target_logger = logging.getLogger(logger_name)
    handler = _ListLogHandler()
    previous_level = target_logger.level
    if previous_level in (logging.NOTSET, logging.WARNING, logging.ERROR, logging.CRITICAL):
        target_logger.setLevel(logging.INFO)
    target_logger.addHandler(handler)
    try:
        yield handler.records
    finally:
        target_logger.removeHandler(handler)
        target_logger.setLevel(previous_level)


def run_filter(
    source: Union[str, Path],
    destination: Union[str, Path],
    transform: Transform,
    params: Optional[Dict[str, Any]] = None,
    clamp: bool = False,
) -> OperationResult:
    """
    Apply one filter to a bitmap file and write the result to a new file.

    Args:
        source: Path of the bitmap to read
        destination: Path of the bitmap to write
        transform: Filter to apply
        params: Keyword parameters for the filter, already validated
        clamp: Clamp channels to 0-255 before encoding instead of wrapping

    Returns:
        OperationResult; ``ok`` is False if the source is missing or not a
        valid 24-bit bitmap, a parameter is missing, or the destination
        cannot be written.
    """
    operation = "run_filter"
    source = str(source)
    destination = str(destination)
    context = {"source": source, "destination": destination, "transform": transform.value}

    if not Path(source).exists():
        return OperationResult.failure(
            operation=operation,
            error=f"Source image not found: {source}",
            **context,
        )

    with _capture_logs() as logs:
        image = bmp_codec.decode(source)
        if is_empty(image):
            result = OperationResult.failure(
                operation=operation,
                error=f"{source} is not a valid uncompressed 24-bit bitmap",
                **context,
            )
            result.logs = logs
            return result

        in_height, in_width = grid_size(image)

        try:
            new_image = apply_transform(transform, image, **(params or {}))
        except TransformError as e:
            result = OperationResult.failure(operation=operation, error=str(e), **context)
            result.logs = logs
            return result

        if clamp:
            new_image = clamp_channels(new_image)

        height, width = grid_size(new_image)
        if not bmp_codec.encode(destination, new_image):
            result = OperationResult.failure(
                operation=operation,
                error=f"Could not open {destination} for writing",
                **context,
            )
            result.logs = logs
            return result

        logger.info(f"Wrote {transform.value} result to {destination}")
        result = OperationResult.success(
            operation=operation,
            width=width,
            height=height,
            **context,
        )
        result.metadata["input_size"] = (in_width, in_height)
        result.metadata["params"] = dict(params or {})
        result.metadata["clamped"] = clamp
        result.logs = logs
        return result


def inspect_bitmap(path: Union[str, Path]) -> OperationResult:
    """
    Read a bitmap's headers and check whether it decodes.

    Returns:
        OperationResult whose metadata holds the parsed header fields.
    """
    operation = "inspect_bitmap"
    path = str(path)

    if not Path(path).exists():
        return OperationResult.failure(
            operation=operation,
            error=f"Image not found: {path}",
            source=path,
        )

    with _capture_logs() as logs:
        info = bmp_codec.read_bmp_info(path)
        if info is None:
            result = OperationResult.failure(
                operation=operation,
                error=f"{path} is too short to hold bitmap headers",
                source=path,
            )
            result.logs = logs
            return result

        result = OperationResult.success(
            operation=operation,
            source=path,
            width=info.width,
            height=info.height,
        )
        result.metadata.update({
            "signature": info.signature.decode("latin-1"),
            "file_size": info.file_size,
            "data_offset": info.data_offset,
            "header_size": info.header_size,
            "planes": info.planes,
            "bits_per_pixel": info.bits_per_pixel,
            "compression": info.compression,
            "image_size": info.image_size,
            "row_padding": info.padding,
            "expected_file_size": info.expected_file_size,
        })

        if info.signature != bmp_codec.SIGNATURE:
            result.add_warning(f"Unexpected signature {info.signature!r}")

        if is_empty(bmp_codec.decode(path)):
            result.add_error("Image does not decode as an uncompressed 24-bit bitmap")

        result.logs = logs
        return result
