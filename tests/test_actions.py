"""Tests for core workflow actions."""

import struct

from PIL import Image

from bmp_filters.bmp_codec import decode, encode_bytes
from bmp_filters.core.actions import inspect_bitmap, run_filter
from bmp_filters.grid import Pixel, WHITE
from bmp_filters.transforms import Transform


def _make_bmp(tmp_path, size=(4, 2), color=(255, 255, 255), name="source.bmp") -> str:
    """Create a BMP file with Pillow."""
    img = Image.new("RGB", size, color=color)
    path = tmp_path / name
    img.save(path, format="BMP")
    return str(path)


class TestRunFilter:
    """decode -> transform -> encode workflow."""

    def test_grayscale_white_scenario(self, tmp_path):
        src = _make_bmp(tmp_path)
        dst = tmp_path / "gray.bmp"

        result = run_filter(src, dst, Transform.GRAYSCALE)

        assert result.ok
        assert (result.width, result.height) == (4, 2)
        assert dst.stat().st_size == 78
        assert all(p == WHITE for row in decode(str(dst)) for p in row)

    def test_enlarge_dimensions(self, tmp_path):
        src = _make_bmp(tmp_path, size=(3, 2), color=(10, 20, 30))
        dst = tmp_path / "big.bmp"

        result = run_filter(src, dst, Transform.ENLARGE, {"xscale": 2, "yscale": 3})

        assert result.ok
        assert (result.width, result.height) == (6, 6)
        assert result.metadata["input_size"] == (3, 2)
        with Image.open(dst) as img:
            assert img.size == (6, 6)

    def test_rotate_quarter_turns(self, tmp_path):
        src = _make_bmp(tmp_path, size=(5, 2))
        dst = tmp_path / "rot.bmp"

        result = run_filter(src, dst, Transform.ROTATE, {"count": 3})

        assert result.ok
        assert (result.width, result.height) == (2, 5)

    def test_missing_source(self, tmp_path):
        result = run_filter(tmp_path / "nope.bmp", tmp_path / "out.bmp", Transform.GRAYSCALE)

        assert not result.ok
        assert "not found" in result.errors[0]
        assert not (tmp_path / "out.bmp").exists()

    def test_invalid_source(self, tmp_path):
        data = bytearray(encode_bytes([[WHITE, WHITE]]))
        struct.pack_into("<I", data, 2, 999)
        src = tmp_path / "bad.bmp"
        src.write_bytes(bytes(data))

        result = run_filter(src, tmp_path / "out.bmp", Transform.GRAYSCALE)

        assert not result.ok
        assert "not a valid" in result.errors[0]
        assert any("declared size" in line for line in result.logs)
        assert not (tmp_path / "out.bmp").exists()

    def test_missing_params(self, tmp_path):
        src = _make_bmp(tmp_path)
        result = run_filter(src, tmp_path / "out.bmp", Transform.LIGHTEN)

        assert not result.ok
        assert "scale" in result.errors[0]

    def test_unwritable_destination(self, tmp_path):
        src = _make_bmp(tmp_path)
        result = run_filter(src, tmp_path / "no_dir" / "out.bmp", Transform.GRAYSCALE)

        assert not result.ok
        assert "for writing" in result.errors[0]

    def test_clamp(self, tmp_path):
        # A 1-pixel-high, wide image drives vignette factors negative
        src = _make_bmp(tmp_path, size=(10, 1))
        wrapped = tmp_path / "wrapped.bmp"
        clamped = tmp_path / "clamped.bmp"

        assert run_filter(src, wrapped, Transform.VIGNETTE).ok
        assert run_filter(src, clamped, Transform.VIGNETTE, clamp=True).ok

        assert decode(str(clamped))[0][0] == Pixel(0, 0, 0)
        assert decode(str(wrapped))[0][0] != Pixel(0, 0, 0)

    def test_summary_and_dict(self, tmp_path):
        src = _make_bmp(tmp_path)
        result = run_filter(src, tmp_path / "out.bmp", Transform.POSTERIZE)

        assert result.to_summary().startswith("[SUCCESS] run_filter")
        data = result.to_dict()
        assert data["transform"] == "posterize"
        assert data["ok"] is True


class TestInspectBitmap:
    """Header inspection."""

    def test_valid(self, tmp_path):
        src = _make_bmp(tmp_path, size=(7, 3))
        result = inspect_bitmap(src)

        assert result.ok
        assert (result.width, result.height) == (7, 3)
        assert result.metadata["bits_per_pixel"] == 24
        assert result.metadata["row_padding"] == 3
        assert result.metadata["signature"] == "BM"

    def test_inconsistent(self, tmp_path):
        data = bytearray(encode_bytes([[WHITE]]))
        struct.pack_into("<I", data, 2, 1)
        src = tmp_path / "bad.bmp"
        src.write_bytes(bytes(data))

        result = inspect_bitmap(src)

        assert not result.ok
        assert result.metadata["file_size"] == 1

    def test_too_short(self, tmp_path):
        src = tmp_path / "short.bmp"
        src.write_bytes(b"BM")

        result = inspect_bitmap(src)
        assert not result.ok
        assert not result.metadata

    def test_missing(self, tmp_path):
        assert not inspect_bitmap(tmp_path / "nope.bmp").ok
