import pytest

from tests.builders import make_layer, make_layer_scheme
from tile_atlas.definition import LayerDefinition, Rect
from tile_atlas.errors import LayoutError
from tile_atlas.layout import compute_layout, grid_bounds
from tile_atlas.schemes.layer import parse_layer_scheme


def make_definition(*layers: tuple, tile_size: int = 16) -> LayerDefinition:
    return parse_layer_scheme(
        make_layer_scheme(
            [make_layer(name, values) for name, values in layers], tile_size=tile_size
        )
    )


def rows_used(definition: LayerDefinition, layer: str) -> set:
    return {rect.y // definition.tile_size for rect in definition.layer(layer).value_rects.values()}


def test_grid_bounds() -> None:
    assert grid_bounds(32, 16, 16) == (1, 0)
    assert grid_bounds(40, 47, 16) == (1, 1)
    assert grid_bounds(8, 8, 16) == (-1, -1)


def test_single_layer_scenario() -> None:
    definition = compute_layout(
        parse_layer_scheme(make_layer_scheme()), width=32, height=16
    )
    rects = definition.layer("base").value_rects
    assert rects["a"] == Rect(0, 0, 16, 16)
    assert rects["b"] == (16, 0, 16, 16)
    assert definition.is_laid_out


def test_input_definition_is_untouched() -> None:
    definition = make_definition(("body", ["a", "b"]))
    laid_out = compute_layout(definition, 64, 64)
    assert len(definition.layer("body").value_rects) == 0
    assert laid_out is not definition
    assert laid_out.default_tile == definition.default_tile


def test_values_wrap_within_layer() -> None:
    definition = compute_layout(
        make_definition(("body", ["a", "b", "c", "d", "e"])), width=48, height=64
    )
    rects = definition.layer("body").value_rects
    assert [rects[v] for v in "abcde"] == [
        Rect(0, 0, 16, 16),
        Rect(16, 0, 16, 16),
        Rect(32, 0, 16, 16),
        Rect(0, 16, 16, 16),
        Rect(16, 16, 16, 16),
    ]


def test_each_layer_starts_on_a_fresh_row() -> None:
    definition = compute_layout(
        make_definition(("body", ["a"]), ("color", ["r", "g"]), ("hat", ["cap"])),
        width=64,
        height=64,
    )
    assert definition.layer("body").value_rects["a"] == Rect(0, 0, 16, 16)
    assert definition.layer("color").value_rects["g"] == Rect(16, 16, 16, 16)
    assert definition.layer("hat").value_rects["cap"] == Rect(0, 32, 16, 16)


def test_layers_never_share_a_row() -> None:
    definition = compute_layout(
        make_definition(
            ("body", ["a", "b", "c"]),
            ("color", ["r", "g", "b", "y", "k"]),
            ("hat", ["cap", "crown"]),
        ),
        width=32,
        height=160,
    )
    seen: set = set()
    for name in definition.layer_names:
        rows = rows_used(definition, name)
        assert not rows & seen
        seen |= rows


def test_layer_filling_its_row_exactly_leaves_a_blank_row() -> None:
    definition = compute_layout(
        make_definition(("body", ["a", "b"]), ("hat", ["cap"])), width=32, height=48
    )
    assert rows_used(definition, "body") == {0}
    assert definition.layer("hat").value_rects["cap"] == Rect(0, 32, 16, 16)


def test_blank_row_after_exact_fill_counts_against_height() -> None:
    definition = make_definition(("body", ["a", "b"]), ("hat", ["cap"]))
    with pytest.raises(LayoutError, match=r'"hat" value "cap" needs row 2'):
        compute_layout(definition, width=32, height=32)


def test_atlas_too_small_names_layer_and_value() -> None:
    definition = make_definition(("body", ["a", "b"]), ("hat", ["cap", "crown"]))
    with pytest.raises(LayoutError) as exc:
        compute_layout(definition, width=32, height=16)
    message = str(exc.value)
    assert "too small" in message
    assert '"hat"' in message and '"cap"' in message


def test_atlas_too_small_mid_layer() -> None:
    definition = make_definition(("body", ["a", "b", "c"]))
    with pytest.raises(LayoutError, match='"body" value "c"'):
        compute_layout(definition, width=32, height=16)


@pytest.mark.parametrize("width, height", [(15, 64), (64, 15), (0, 0)])
def test_atlas_smaller_than_one_tile(width, height) -> None:
    with pytest.raises(LayoutError):
        compute_layout(make_definition(("body", ["a"])), width=width, height=height)


def test_rect_size_is_tile_size() -> None:
    definition = compute_layout(make_definition(("body", ["a", "b"]), tile_size=8), 16, 8)
    for rect in definition.layer("body").value_rects.values():
        assert (rect.width, rect.height) == (8, 8)
