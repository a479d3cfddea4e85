"""Tests for the bmp-filters command line."""

import json
import subprocess
import sys

from PIL import Image
from typer.testing import CliRunner

from bmp_filters.bmp_codec import decode
from bmp_filters.cli import app
from bmp_filters.grid import Pixel

runner = CliRunner()


def _make_bmp(tmp_path, size=(4, 2), color=(200, 50, 50), name="source.bmp") -> str:
    """Create a BMP file with Pillow."""
    img = Image.new("RGB", size, color=color)
    path = tmp_path / name
    img.save(path, format="BMP")
    return str(path)


class TestApply:
    """The apply command."""

    def test_posterize(self, tmp_path):
        src = _make_bmp(tmp_path)
        dst = str(tmp_path / "out.bmp")

        result = runner.invoke(app, ["apply", src, dst, "--filter", "posterize"])

        assert result.exit_code == 0, result.output
        assert decode(dst)[0][0] == Pixel(255, 0, 0)

    def test_menu_letter_with_scale(self, tmp_path):
        src = _make_bmp(tmp_path, color=(100, 100, 100))
        dst = str(tmp_path / "dark.bmp")

        result = runner.invoke(app, ["apply", src, dst, "-f", "J", "--scale", "0.5"])

        assert result.exit_code == 0, result.output
        assert decode(dst)[1][3] == Pixel(50, 50, 50)

    def test_enlarge(self, tmp_path):
        src = _make_bmp(tmp_path, size=(2, 1))
        dst = str(tmp_path / "big.bmp")

        result = runner.invoke(
            app, ["apply", src, dst, "-f", "enlarge", "--xscale", "3", "--yscale", "2"]
        )

        assert result.exit_code == 0, result.output
        grid = decode(dst)
        assert (len(grid), len(grid[0])) == (2, 6)

    def test_json_output(self, tmp_path):
        src = _make_bmp(tmp_path)
        dst = str(tmp_path / "gray.bmp")

        result = runner.invoke(app, ["apply", src, dst, "-f", "grayscale", "--json"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["ok"] is True
        assert payload["transform"] == "grayscale"

    def test_json_output_is_clean_stdout(self, tmp_path):
        """Log records go to stderr, so stdout parses as JSON on its own."""
        src = _make_bmp(tmp_path)
        dst = str(tmp_path / "gray.bmp")

        proc = subprocess.run(
            [sys.executable, "-m", "bmp_filters.cli", "apply", src, dst, "-f", "grayscale", "--json"],
            capture_output=True,
            text=True,
        )

        assert proc.returncode == 0, proc.stderr
        payload = json.loads(proc.stdout)
        assert payload["ok"] is True
        assert payload["destination"] == dst
        assert "Wrote" in proc.stderr

    def test_json_failure_is_clean_stdout(self, tmp_path):
        src = tmp_path / "junk.bmp"
        src.write_bytes(b"not a bitmap at all")

        result = runner.invoke(
            app, ["apply", str(src), str(tmp_path / "o.bmp"), "-f", "grayscale", "--json"]
        )

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["ok"] is False
        assert payload["errors"]

    def test_unknown_filter(self, tmp_path):
        src = _make_bmp(tmp_path)
        result = runner.invoke(app, ["apply", src, str(tmp_path / "o.bmp"), "-f", "sepia"])
        assert result.exit_code == 2

    def test_scale_out_of_range(self, tmp_path):
        src = _make_bmp(tmp_path)
        result = runner.invoke(
            app, ["apply", src, str(tmp_path / "o.bmp"), "-f", "lighten", "--scale", "1.5"]
        )
        assert result.exit_code == 2
        assert not (tmp_path / "o.bmp").exists()

    def test_missing_scale(self, tmp_path):
        src = _make_bmp(tmp_path)
        result = runner.invoke(app, ["apply", src, str(tmp_path / "o.bmp"), "-f", "clarendon"])
        assert result.exit_code == 2

    def test_destination_must_be_bmp(self, tmp_path):
        src = _make_bmp(tmp_path)
        result = runner.invoke(app, ["apply", src, str(tmp_path / "o.png"), "-f", "grayscale"])
        assert result.exit_code == 2

    def test_destination_must_differ(self, tmp_path):
        src = _make_bmp(tmp_path)
        result = runner.invoke(app, ["apply", src, src, "-f", "grayscale"])
        assert result.exit_code == 2

    def test_invalid_source_fails(self, tmp_path):
        src = tmp_path / "junk.bmp"
        src.write_bytes(b"not a bitmap at all")

        result = runner.invoke(app, ["apply", str(src), str(tmp_path / "o.bmp"), "-f", "grayscale"])

        assert result.exit_code == 1
        assert not (tmp_path / "o.bmp").exists()


class TestInfoAndList:
    """Read-only commands."""

    def test_info_valid(self, tmp_path):
        src = _make_bmp(tmp_path, size=(7, 3))
        result = runner.invoke(app, ["info", src])

        assert result.exit_code == 0, result.output
        assert "bits_per_pixel" in result.output

    def test_info_invalid(self, tmp_path):
        src = tmp_path / "short.bmp"
        src.write_bytes(b"BM")

        result = runner.invoke(app, ["info", str(src)])
        assert result.exit_code == 1

    def test_list_filters(self):
        result = runner.invoke(app, ["list-filters"])

        assert result.exit_code == 0
        assert "clarendon" in result.output
        assert "posterize" in result.output


class TestMenu:
    """The interactive menu."""

    def test_apply_filter_then_quit(self, tmp_path):
        src = _make_bmp(tmp_path, color=(10, 10, 10))
        dst = str(tmp_path / "contrast.bmp")

        result = runner.invoke(app, ["menu", src], input=f"H\n{dst}\nQ\n")

        assert result.exit_code == 0, result.output
        assert decode(dst)[0][0] == Pixel(0, 0, 0)

    def test_reprompts_on_bad_values(self, tmp_path):
        src = _make_bmp(tmp_path, color=(100, 100, 100))
        dst = str(tmp_path / "light.bmp")

        answers = [
            "I",          # lighten
            "2",          # out of range
            "0.5",
            "light.png",  # wrong suffix
            src,          # same as source
            dst,
            "Q",
        ]
        result = runner.invoke(app, ["menu", src], input="\n".join(answers) + "\n")

        assert result.exit_code == 0, result.output
        assert decode(dst)[0][0] == Pixel(177, 177, 177)

    def test_change_image(self, tmp_path):
        first = _make_bmp(tmp_path, name="first.bmp")
        second = _make_bmp(tmp_path, size=(3, 5), name="second.bmp")
        dst = str(tmp_path / "rotated.bmp")

        answers = ["A", first, second, "E", dst, "q"]
        result = runner.invoke(app, ["menu", first], input="\n".join(answers) + "\n")

        assert result.exit_code == 0, result.output
        grid = decode(dst)
        assert (len(grid), len(grid[0])) == (3, 5)

    def test_prompts_for_source(self, tmp_path):
        src = _make_bmp(tmp_path)
        result = runner.invoke(app, ["menu"], input=f"photo.jpg\n{src}\nQ\n")

        assert result.exit_code == 0, result.output
        assert "Filename is" in result.output

    def test_failed_run_prints_summary(self, tmp_path):
        src = tmp_path / "junk.bmp"
        src.write_bytes(b"not a bitmap at all")
        dst = str(tmp_path / "gray.bmp")

        result = runner.invoke(app, ["menu", str(src)], input=f"D\n{dst}\nQ\n")

        assert result.exit_code == 0, result.output
        assert "[FAILED] run_filter" in result.output
        assert "Filter: grayscale" in result.output
        assert not (tmp_path / "gray.bmp").exists()
