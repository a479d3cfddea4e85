"""
bmp-filters CLI

Command-line interface for applying filters to 24-bit BMP images, plus the
classic interactive image processing menu.
"""

import sys
import json
import logging
from typing import Callable, Optional, TypeVar

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.logging import RichHandler

from bmp_filters.transforms import (
    MENU_LABELS,
    MENU_LETTERS,
    TRANSFORM_PARAMS,
    Transform,
)

# Import from core module for unified logic
from bmp_filters.core.parsing import (
    parse_transform as _parse_transform_core,
    parse_scale,
    parse_rotations,
    parse_enlarge_factor,
    validate_bmp_filename,
    build_params,
    SCALE_MIN,
    SCALE_MAX,
    ROTATIONS_MIN,
    ROTATIONS_MAX,
    ENLARGE_MIN,
    ENLARGE_MAX,
)
from bmp_filters.core.results import OperationResult
from bmp_filters.core.actions import (
    run_filter as core_run_filter,
    inspect_bitmap as core_inspect_bitmap,
)

# Setup logging on stderr
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
)
logger = logging.getLogger("bmp_filters")

# Setup Rich console
console = Console()

app = typer.Typer(help="BMP image filters - vignette, clarendon, rotate, enlarge and more")

T = TypeVar("T")


def print_header(text: str) -> None:
    """Print fancy header."""
    console.print(Panel(text, expand=False, style="bold blue"))


def print_success(text: str) -> None:
    """Print success message."""
    console.print(f"✓ {text}", style="green")


def print_warning(text: str) -> None:
    """Print warning message."""
    console.print(f"⚠️  {text}", style="yellow")


def print_error(text: str) -> None:
    """Print error message."""
    console.print(f"❌ {text}", style="red")


def print_result_messages(result: OperationResult) -> None:
    for warning in result.warnings:
        print_warning(warning)
    for error in result.errors:
        print_error(error)


def set_verbose(verbose: bool) -> None:
    if verbose:
        logger.setLevel(logging.DEBUG)


def parse_transform(value: str) -> Transform:
    """
    Parse a filter name.

    CLI wrapper around core.parsing.parse_transform that converts
    ValueError to typer.BadParameter for proper CLI error handling.
    """
    try:
        return _parse_transform_core(value)
    except ValueError as e:
        raise typer.BadParameter(str(e))


def describe_params(transform: Transform) -> str:
    names = TRANSFORM_PARAMS[transform]
    if not names:
        return "-"
    labels = {
        "scale": f"--scale ({SCALE_MIN:g} < s < {SCALE_MAX:g})",
        "count": f"--rotations ({ROTATIONS_MIN}-{ROTATIONS_MAX})",
        "xscale": f"--xscale ({ENLARGE_MIN}-{ENLARGE_MAX})",
        "yscale": f"--yscale ({ENLARGE_MIN}-{ENLARGE_MAX})",
    }
    return ", ".join(labels[name] for name in names)


@app.command("list-filters")
def list_filters() -> None:
    """List available filters and the options they need."""
    letters = {t: letter for letter, t in MENU_LETTERS.items()}

    table = Table(title="Filters")
    table.add_column("Menu", style="yellow")
    table.add_column("Name", style="cyan")
    table.add_column("Description", style="green")
    table.add_column("Options", style="magenta")

    for transform in Transform:
        table.add_row(
            letters.get(transform, ""),
            transform.value,
            MENU_LABELS[transform],
            describe_params(transform),
        )

    console.print(table)


@app.command()
def info(image: str = typer.Argument(..., help="Path to BMP file")) -> None:
    """Show the header fields of a BMP file and whether it decodes."""
    print_header(f"BMP Info: {image}")

    result = core_inspect_bitmap(image)

    if result.metadata:
        table = Table()
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("width", str(result.width))
        table.add_row("height", str(result.height))
        for key, value in result.metadata.items():
            table.add_row(key, str(value))
        console.print(table)

    print_result_messages(result)

    if not result.ok:
        raise typer.Exit(code=1)

    print_success("Valid uncompressed 24-bit bitmap")


@app.command()
def apply(
    source: str = typer.Argument(..., help="Input BMP file"),
    destination: str = typer.Argument(..., help="Output BMP file"),
    filter_name: str = typer.Option(
        ...,
        "--filter", "-f",
        help="Filter name or menu letter (see list-filters)",
    ),
    scale: Optional[float] = typer.Option(
        None, "--scale", "-s", help="Scale factor between 0 and 1 (clarendon, lighten, darken)"
    ),
    rotations: Optional[int] = typer.Option(
        None, "--rotations", "-r", help="Clockwise quarter turns, 1-100 (rotate)"
    ),
    xscale: Optional[int] = typer.Option(None, "--xscale", "-x", help="Horizontal factor, 2-5 (enlarge)"),
    yscale: Optional[int] = typer.Option(None, "--yscale", "-y", help="Vertical factor, 2-5 (enlarge)"),
    clamp: bool = typer.Option(
        False, "--clamp", help="Clamp channels to 0-255 instead of wrapping overflow"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """
    Apply one filter to a BMP file and save the result as a new BMP file.

    Example:
        bmp-filters apply photo.bmp photo_light.bmp --filter lighten --scale 0.5
    """
    set_verbose(verbose)

    transform = parse_transform(filter_name)

    try:
        destination = validate_bmp_filename(destination, source)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="DESTINATION")

    try:
        params = build_params(
            transform,
            scale=scale,
            rotations=rotations,
            xscale=xscale,
            yscale=yscale,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e))

    result = core_run_filter(source, destination, transform, params, clamp=clamp)

    if as_json:
        # Errors and warnings are already part of the payload.
        console.print_json(json.dumps(result.to_dict()))
    elif not result.ok:
        print_result_messages(result)
    if not result.ok:
        raise typer.Exit(code=1)

    if not as_json:
        print_success(
            f"{MENU_LABELS[transform]} applied: {destination} ({result.width}x{result.height})"
        )


def prompt_until(text: str, parse: Callable[[str], T]) -> T:
    """Prompt repeatedly until ``parse`` accepts the answer."""
    while True:
        raw = typer.prompt(text)
        try:
            return parse(raw)
        except ValueError as e:
            print_error(str(e))


def prompt_params(transform: Transform) -> dict:
    names = TRANSFORM_PARAMS[transform]
    params = {}
    if "scale" in names:
        params["scale"] = prompt_until(
            f"Enter a {transform.value} scale factor between 0 and 1", parse_scale
        )
    if "count" in names:
        params["count"] = prompt_until(
            f"Enter the number of clockwise rotations between {ROTATIONS_MIN} and {ROTATIONS_MAX}",
            parse_rotations,
        )
    if "xscale" in names:
        params["xscale"] = prompt_until(
            f"Enter a xscale value between {ENLARGE_MIN} and {ENLARGE_MAX}", parse_enlarge_factor
        )
        params["yscale"] = prompt_until(
            f"Enter a yscale value between {ENLARGE_MIN} and {ENLARGE_MAX}", parse_enlarge_factor
        )
    return params


def print_menu() -> None:
    console.print()
    console.print("[bold]IMAGE PROCESSING MENU[/bold]")
    console.print("A) Change Image")
    for letter, transform in MENU_LETTERS.items():
        console.print(f"{letter}) {MENU_LABELS[transform]}")
    console.print()


@app.command()
def menu(
    source: Optional[str] = typer.Argument(None, help="Initial BMP file"),
    clamp: bool = typer.Option(
        False, "--clamp", help="Clamp channels to 0-255 instead of wrapping overflow"
    ),
) -> None:
    """Interactive image processing menu."""
    print_header("Image Processing Application")

    if source is None:
        source = prompt_until("Enter input BMP filename", validate_bmp_filename)
    else:
        try:
            source = validate_bmp_filename(source)
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="SOURCE")
    console.print(f"Filename is {source}")

    while True:
        print_menu()
        choice = typer.prompt("Enter Menu Selection (Q to quit)").strip().upper()

        if choice == "Q":
            break

        if choice == "A":
            current = source
            source = prompt_until(
                "Enter input BMP filename",
                lambda name: validate_bmp_filename(name, current),
            )
            print_success(f"Your new filename is: {source}")
            continue

        transform = MENU_LETTERS.get(choice)
        if transform is None:
            print_error(f"Unknown menu selection '{choice}'")
            continue

        params = prompt_params(transform)
        destination = prompt_until(
            "Enter your new BMP save filename",
            lambda name: validate_bmp_filename(name, source),
        )

        result = core_run_filter(source, destination, transform, params, clamp=clamp)
        if result.ok:
            print_success(f"A new file called {destination} has been created!")
        else:
            console.print(result.to_summary(), style="red", markup=False)


def main() -> None:
    """Main entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(0)
    except Exception as e:
        console.print(f"\n[red bold]Fatal error:[/red bold] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
