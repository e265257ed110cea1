"""spilut CLI application.

Commands:
    apply       - Apply an SPI3D LUT to an image
    info        - Show the dimensions (and optionally cells) of an SPI3D LUT
    check-spi1d - Validate an SPI1D header
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from spilut import __version__
from spilut.config import DEFAULT_DISPLAY_GAMMA
from spilut.core.filter import LutFilter
from spilut.core.types import LUT1D, LUT3D
from spilut.errors import ImageError
from spilut.io.spi import load_spi1d_from_file, load_spi3d_from_file

app = typer.Typer(
    name="spilut",
    help="Apply SPI 3D LUTs to images.",
    no_args_is_help=True,
)
console = Console()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)


def version_callback(value: bool):
    if value:
        console.print(f"spilut v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", "-V", help="Show version and exit.",
        callback=version_callback, is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    if verbose:
        logging.getLogger("spilut").setLevel(logging.DEBUG)


def _print_errors(err: list[str]) -> None:
    for msg in err:
        console.print(msg, style="red", markup=False)


@app.command()
def apply(
    input_image: Path = typer.Argument(..., help="Input image path."),
    lut_file: Path = typer.Argument(..., help="SPI3D LUT path."),
    output: Path = typer.Argument(..., help="Output image path (.png)."),
    gamma: float = typer.Option(
        DEFAULT_DISPLAY_GAMMA, "-g", "--gamma",
        min=0.0, help="Display gamma for the output (0 = write linear values).",
    ),
    heatmap: bool = typer.Option(
        False, "--heatmap", help="Write a log2 heatmap of the result instead.",
    ),
):
    """Apply a 3D LUT to an image with trilinear interpolation."""
    from spilut.io.image import load_image, save_image

    lut = LUT3D()
    err: list[str] = []
    if not load_spi3d_from_file(lut_file, lut, err):
        _print_errors(err)
        console.print("[red]Failed to load SPI 3D lut.[/red]")
        raise typer.Exit(code=1)

    lut_filter = LutFilter.from_lut(lut)
    if not lut_filter.is_valid():
        console.print(f"[red]LUT is empty:[/red] {lut_file}")
        raise typer.Exit(code=1)

    try:
        src, meta = load_image(input_image)
    except (FileNotFoundError, ImageError) as e:
        console.print(f"[red]Failed to load image:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"\n[bold]Apply 3D LUT[/bold]")
    console.print(f"  Image: {input_image} ({meta['width']}x{meta['height']})")
    console.print(f"  LUT:   {lut_file} ({lut.x_dim}x{lut.y_dim}x{lut.z_dim})")

    dst = lut_filter.apply_array(src)
    if heatmap:
        dst = LutFilter.heatmap_array(dst)

    try:
        save_image(dst, output, bit_depth=8, gamma=gamma or None)
    except (FileNotFoundError, PermissionError) as e:
        console.print(f"[red]Failed to save image:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"\n[green]Saved:[/green] {output}\n")


@app.command()
def info(
    lut_file: Path = typer.Argument(..., help="SPI3D LUT path."),
    dump: bool = typer.Option(False, "--dump", help="Print every cell value."),
):
    """Show the grid size of an SPI3D LUT."""
    lut = LUT3D()
    err: list[str] = []
    if not load_spi3d_from_file(lut_file, lut, err):
        _print_errors(err)
        raise typer.Exit(code=1)

    console.print(f"x size {lut.x_dim}")
    console.print(f"y size {lut.y_dim}")
    console.print(f"z size {lut.z_dim}")

    if not dump:
        return

    table = Table(title=str(lut_file), show_header=True, header_style="bold")
    for name in ("x", "y", "z"):
        table.add_column(name, justify="right", style="cyan")
    for name in ("R", "G", "B"):
        table.add_column(name, justify="right")

    for z in range(lut.z_dim):
        for y in range(lut.y_dim):
            for x in range(lut.x_dim):
                r, g, b = lut.get(x, y, z)
                table.add_row(str(x), str(y), str(z), f"{r:.6f}", f"{g:.6f}", f"{b:.6f}")

    console.print(table)


@app.command("check-spi1d")
def check_spi1d(
    lut_file: Path = typer.Argument(..., help="SPI1D LUT path."),
):
    """Validate the header of an SPI1D LUT."""
    lut = LUT1D()
    err: list[str] = []
    if not load_spi1d_from_file(lut_file, lut, err):
        _print_errors(err)
        raise typer.Exit(code=1)

    console.print(f"[green]OK:[/green] {lut_file} (version {lut.version})")


def main():
    app()


if __name__ == "__main__":
    main()
