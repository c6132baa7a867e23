import numpy as np
import pytest
from pyrsistent import pmap

from tests.builders import (
    BLUE,
    CLEAR,
    GREEN,
    RED,
    cell,
    is_solid,
    make_atlas,
    make_layer,
    make_layer_scheme,
)
from tile_atlas.definition import LayerDefinition
from tile_atlas.errors import CompositeError
from tile_atlas.layout import compute_layout
from tile_atlas.renderer.compositor import composite_tiles, output_size, tile_origin
from tile_atlas.schemes.layer import parse_layer_scheme

HALF_RED = (255, 0, 0, 128)


def make_laid_out(tiles_per_row: int = 4) -> LayerDefinition:
    """``body`` on atlas row 0 (a=RED, b=GREEN), ``hat`` on row 1 (cap=BLUE, veil=HALF_RED)."""
    definition = parse_layer_scheme(
        make_layer_scheme(
            [
                make_layer("body", ["a", "b"]),
                make_layer("hat", ["cap", "veil"]),
            ],
            tiles_per_row=tiles_per_row,
        )
    )
    return compute_layout(definition, 48, 32)


BASE = make_atlas([[RED, GREEN, CLEAR], [BLUE, HALF_RED, CLEAR]])


def tile(body: str = "", hat: str = ""):
    return pmap({"body": body, "hat": hat})


def test_output_size_rounds_rows_up() -> None:
    definition = make_laid_out(tiles_per_row=4)
    assert output_size(definition, 4) == (64, 16)
    assert output_size(definition, 5) == (64, 32)
    assert output_size(definition, 8) == (64, 32)


def test_tile_origin() -> None:
    definition = make_laid_out(tiles_per_row=3)
    assert tile_origin(definition, 0) == (0, 0)
    assert tile_origin(definition, 2) == (32, 0)
    assert tile_origin(definition, 4) == (16, 16)


def test_single_layer_copies_sprite() -> None:
    out = composite_tiles(BASE, make_laid_out(), [tile(body="b"), tile(body="a")])
    assert out.shape == (16, 64, 4)
    assert out.dtype == np.uint8
    assert is_solid(cell(out, 0, 0), GREEN)
    assert is_solid(cell(out, 1, 0), RED)
    assert is_solid(cell(out, 2, 0), CLEAR)
    assert is_solid(cell(out, 3, 0), CLEAR)


def test_higher_layer_paints_over_lower() -> None:
    out = composite_tiles(BASE, make_laid_out(), [tile(body="a", hat="cap")])
    assert is_solid(cell(out, 0, 0), BLUE)


def test_translucent_layer_blends_over_lower() -> None:
    out = composite_tiles(BASE, make_laid_out(), [tile(body="b", hat="veil")])
    pixel = tuple(int(c) for c in out[0, 0])
    # 128/255 red over opaque green.
    assert pixel == (128, 127, 0, 255)


def test_null_layer_preserves_lower_paint() -> None:
    out = composite_tiles(BASE, make_laid_out(), [tile(body="a", hat="")])
    assert is_solid(cell(out, 0, 0), RED)


def test_all_null_tile_stays_transparent() -> None:
    out = composite_tiles(BASE, make_laid_out(), [tile(body="a"), tile(), tile(hat="cap")])
    assert is_solid(cell(out, 1, 0), CLEAR)
    assert is_solid(cell(out, 2, 0), BLUE)


def test_tiles_wrap_onto_rows() -> None:
    tiles = [tile(body="a")] * 4 + [tile(body="b")]
    out = composite_tiles(BASE, make_laid_out(tiles_per_row=4), tiles)
    assert out.shape == (32, 64, 4)
    assert is_solid(cell(out, 0, 1), GREEN)
    assert is_solid(cell(out, 1, 1), CLEAR)


def test_output_is_deterministic() -> None:
    tiles = [tile(body="a", hat="veil"), tile(body="b", hat="cap"), tile()]
    first = composite_tiles(BASE, make_laid_out(), tiles)
    second = composite_tiles(BASE, make_laid_out(), tiles)
    assert np.array_equal(first, second)


def test_base_atlas_is_not_modified() -> None:
    base = BASE.copy()
    composite_tiles(base, make_laid_out(), [tile(body="a", hat="veil")])
    assert np.array_equal(base, BASE)


def test_requires_laid_out_definition() -> None:
    definition = parse_layer_scheme(make_layer_scheme())
    with pytest.raises(CompositeError, match="has not been laid out"):
        composite_tiles(BASE, definition, [pmap({"base": "a"})])


def test_rect_outside_base_atlas_is_fatal() -> None:
    definition = make_laid_out()
    with pytest.raises(CompositeError, match="outside"):
        composite_tiles(BASE[:16], definition, [tile(hat="cap")])
