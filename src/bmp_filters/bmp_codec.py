"""
Bitmap codec for uncompressed 24-bit BMP files.

decode() turns a file into a Grid and encode() writes a Grid back out.
Neither raises for bad data: an invalid or unsupported source decodes to
an empty grid, and an unwritable destination makes encode() return False.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
import logging
import struct

from .grid import Grid, Pixel, grid_size, is_empty

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

SIGNATURE = b"BM"
FILE_HEADER_SIZE = 14
INFO_HEADER_SIZE = 40
PIXEL_DATA_OFFSET = FILE_HEADER_SIZE + INFO_HEADER_SIZE
BITS_PER_PIXEL = 24
PIXELS_PER_METER = 2835

# 32-bit sources are read with their 4th byte ignored.
SUPPORTED_BITS_PER_PIXEL = (24, 32)


def read_le_int(data: bytes, offset: int, size: int, signed: bool = False) -> int:
    """
    Read a little-endian integer of exactly ``size`` bytes.

    Byte ``i`` of the field contributes ``byte * 256**i``.
    """
    result = 0
    base = 1
    for i in range(size):
        result += data[offset + i] * base
        base *= 256
    if signed and result >= base // 2:
        result -= base
    return result


@dataclass(frozen=True)
class BmpInfo:
    signature: bytes
    file_size: int
    data_offset: int
    header_size: int
    width: int
    height: int
    planes: int
    bits_per_pixel: int
    compression: int
    image_size: int

    @property
    def row_size(self) -> int:
        """Bytes of pixel payload per row, before padding."""
        return self.width * (self.bits_per_pixel // 8)

    @property
    def padding(self) -> int:
        if self.row_size % 4 == 0:
            return 0
        return 4 - self.row_size % 4

    @property
    def expected_file_size(self) -> int:
        return self.data_offset + (self.row_size + self.padding) * self.height

    @property
    def is_consistent(self) -> bool:
        """True when the declared file size matches the declared layout."""
        return self.file_size == self.expected_file_size


def parse_bmp_info(data: bytes) -> BmpInfo:
    if len(data) < PIXEL_DATA_OFFSET:
        raise ValueError("BMP too small to contain header")

    return BmpInfo(
        signature=bytes(data[0:2]),
        file_size=read_le_int(data, 2, 4),
        data_offset=read_le_int(data, 10, 4),
        header_size=read_le_int(data, 14, 4),
        width=read_le_int(data, 18, 4, signed=True),
        height=read_le_int(data, 22, 4, signed=True),
        planes=read_le_int(data, 26, 2),
        bits_per_pixel=read_le_int(data, 28, 2),
        compression=read_le_int(data, 30, 4),
        image_size=read_le_int(data, 34, 4),
    )


def _read_file(path: PathLike) -> Optional[bytes]:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        logger.warning(f"Cannot read bitmap {path}: {e}")
        return None


def read_bmp_info(path: PathLike) -> Optional[BmpInfo]:
    """Parse just the headers of a file; None if unreadable or too short."""
    data = _read_file(path)
    if data is None:
        return None
    try:
        return parse_bmp_info(data)
    except ValueError as e:
        logger.warning(f"Cannot parse bitmap header of {path}: {e}")
        return None


def decode_bytes(data: bytes) -> Grid:
    """Decode bitmap bytes into a Grid, or [] if the image is invalid."""
    try:
        info = parse_bmp_info(data)
    except ValueError as e:
        logger.warning(f"Rejecting bitmap: {e}")
        return []

    logger.debug(
        f"BMP header: {info.width}x{info.height} {info.bits_per_pixel}bpp "
        f"offset={info.data_offset} size={info.file_size}"
    )

    if not info.is_consistent:
        logger.warning(
            f"Rejecting bitmap: declared size {info.file_size} does not match "
            f"layout size {info.expected_file_size}"
        )
        return []

    if info.width <= 0 or info.height <= 0:
        logger.warning(f"Rejecting bitmap: invalid dimensions {info.width}x{info.height}")
        return []

    if info.bits_per_pixel not in SUPPORTED_BITS_PER_PIXEL:
        logger.warning(f"Rejecting bitmap: unsupported bit depth {info.bits_per_pixel}")
        return []

    if info.expected_file_size > len(data):
        logger.warning(
            f"Rejecting bitmap: pixel data truncated ({len(data)} of "
            f"{info.expected_file_size} bytes)"
        )
        return []

    bytes_per_pixel = info.bits_per_pixel // 8
    stride = info.row_size + info.padding

    grid: Grid = []
    # Rows are stored bottom-to-top on disk.
    for row in range(info.height):
        pos = info.data_offset + (info.height - 1 - row) * stride
        pixels = []
        for _ in range(info.width):
            blue, green, red = data[pos:pos + 3]
            pixels.append(Pixel(red, green, blue))
            pos += bytes_per_pixel
        grid.append(pixels)

    return grid


def decode(path: PathLike) -> Grid:
    """Read a bitmap file into a Grid. An empty grid means decode failed."""
    data = _read_file(path)
    if data is None:
        return []
    grid = decode_bytes(data)
    if is_empty(grid):
        logger.warning(f"{path} is not a valid 24-bit bitmap")
    return grid


def encode_bytes(grid: Grid) -> bytes:
    """Serialize a Grid as a 24-bit bottom-up bitmap."""
    height, width = grid_size(grid)

    padding = (4 - (width * 3) % 4) % 4
    array_bytes = (width * 3 + padding) * height

    out = bytearray()
    out += struct.pack(
        "<2sIHHI",
        SIGNATURE,
        PIXEL_DATA_OFFSET + array_bytes,
        0,
        0,
        PIXEL_DATA_OFFSET,
    )
    out += struct.pack(
        "<IiiHHIIiiII",
        INFO_HEADER_SIZE,
        width,
        height,
        1,
        BITS_PER_PIXEL,
        0,
        array_bytes,
        PIXELS_PER_METER,
        PIXELS_PER_METER,
        0,
        0,
    )

    pad = bytes(padding)
    for row in reversed(grid):
        for pixel in row:
            # Out-of-range channels wrap to 8 bits.
            out += bytes((pixel.blue & 0xFF, pixel.green & 0xFF, pixel.red & 0xFF))
        out += pad

    logger.debug(f"Encoded {width}x{height} bitmap: {len(out)} bytes")
    return bytes(out)


def encode(path: PathLike, grid: Grid) -> bool:
    """Write a Grid to ``path``. Returns False if the file cannot be opened."""
    data = encode_bytes(grid)
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        logger.error(f"Cannot open {path} for writing: {e}")
        return False
    return True
