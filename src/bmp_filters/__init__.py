"""
bmp-filters - Batch filters for uncompressed 24-bit BMP images

Decode a bitmap into a pixel grid, apply one filter, encode the result.
"""

__version__ = "0.1.0"

from bmp_filters.grid import Pixel, Grid
from bmp_filters.bmp_codec import decode, encode
from bmp_filters.transforms import Transform, apply_transform

__all__ = [
    "Pixel",
    "Grid",
    "decode",
    "encode",
    "Transform",
    "apply_transform",
    "__version__",
]
