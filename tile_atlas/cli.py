"""Command line entry point: ``tile-atlas``."""

from __future__ import annotations

import json
from typing import NoReturn, Optional

import click

from tile_atlas import __version__
from tile_atlas.config.logging import configure_logging
from tile_atlas.config.settings import GeneratorConfig
from tile_atlas.errors import TileAtlasError
from tile_atlas.layout import compute_layout
from tile_atlas.pipeline import (
    GenerationResult,
    describe_tiles,
    generate_atlas_files,
    layout_to_json,
    read_input,
)
from tile_atlas.schemes.layer import load_layer_scheme
from tile_atlas.schemes.tile import load_tile_scheme
from tile_atlas.utils.image import atlas_size, load_atlas

EXIT_FAILURE = 1
EXIT_IO = 3

_file_arg = click.Path(dir_okay=False)


def _exit_code(kind: Optional[str]) -> int:
    return EXIT_IO if kind == "io" else EXIT_FAILURE


def _fail(error: TileAtlasError) -> NoReturn:
    click.echo(f"Error: {error}", err=True)
    raise click.exceptions.Exit(_exit_code(error.kind))


@click.group()
@click.version_option(version=__version__, prog_name="tile-atlas")
@click.option("-v", "--verbose", is_flag=True, help="Log layer rects and tile dumps.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, log_json: bool) -> None:
    """tile-atlas: composite layered sprites into a packed tile atlas."""
    ctx.obj = GeneratorConfig.from_cli(verbose=verbose, log_json=log_json)
    configure_logging(verbose=verbose, log_json=log_json)


@cli.command()
@click.argument("base", type=_file_arg)
@click.argument("layer_scheme", type=_file_arg)
@click.argument("tile_scheme", type=_file_arg)
@click.argument("output", type=_file_arg)
@click.option(
    "--layout-json",
    "layout_path",
    type=_file_arg,
    default=None,
    help="Also write the computed layer rects as JSON.",
)
@click.option("--overwrite", is_flag=True, help="Replace OUTPUT if it exists.")
@click.pass_obj
def generate(
    config: GeneratorConfig,
    base: str,
    layer_scheme: str,
    tile_scheme: str,
    output: str,
    layout_path: Optional[str],
    overwrite: bool,
) -> None:
    """Build OUTPUT from the BASE atlas and the two schemes."""
    config = GeneratorConfig.from_cli(
        verbose=config.verbose,
        log_json=config.log_json,
        layout_path=layout_path,
        overwrite=overwrite,
    )
    result: GenerationResult = generate_atlas_files(
        base,
        layer_scheme,
        tile_scheme,
        output,
        overwrite=config.overwrite,
        layout_path=config.layout_path,
    )
    if not result.ok:
        click.echo(f"Error ({result.stage}): {result.message}", err=True)
        raise click.exceptions.Exit(_exit_code(result.error_kind))
    click.echo(f"{result.message}: {output}")


@cli.command()
@click.argument("layer_scheme", type=_file_arg)
@click.argument("tile_scheme", type=_file_arg, required=False)
@click.option("--tiles", "show_tiles", is_flag=True, help="Print every parsed tile.")
def validate(layer_scheme: str, tile_scheme: Optional[str], show_tiles: bool) -> None:
    """Check LAYER_SCHEME and, if given, TILE_SCHEME without rendering."""
    try:
        definition = load_layer_scheme(read_input(layer_scheme, "layer scheme"))
        click.echo(
            f'Layer scheme "{definition.name}": {len(definition.layers_ordered)} layers, '
            f"{definition.tile_size}px tiles, {definition.tiles_per_row} per row"
        )
        if tile_scheme is None:
            return
        tiles = load_tile_scheme(read_input(tile_scheme, "tile scheme"), definition)
    except TileAtlasError as exc:
        _fail(exc)
    click.echo(f"Tile scheme: {len(tiles)} tiles")
    if show_tiles:
        for line in describe_tiles(tiles, definition.layer_names):
            click.echo(line)


@cli.command()
@click.argument("base", type=_file_arg)
@click.argument("layer_scheme", type=_file_arg)
def layout(base: str, layer_scheme: str) -> None:
    """Print where each layer value must sit in the BASE atlas."""
    try:
        definition = load_layer_scheme(read_input(layer_scheme, "layer scheme"))
        width, height = atlas_size(load_atlas(base))
        definition = compute_layout(definition, width, height)
    except TileAtlasError as exc:
        _fail(exc)
    click.echo(json.dumps(layout_to_json(definition), indent=2))
