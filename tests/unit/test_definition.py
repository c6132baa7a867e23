from dataclasses import replace

import pytest
from pyrsistent import pmap, pvector

from tile_atlas.definition import Layer, Rect, make_layer_definition


def make_layers() -> list:
    return [
        Layer(name="body", z_order=9, values=pvector(["a", "b"]), allow_null=False, default_value="a"),
        Layer(name="hat", z_order=9, values=pvector(["cap"])),
    ]


def test_make_layer_definition_assigns_z_order_and_defaults() -> None:
    definition = make_layer_definition("S", 16, 4, make_layers())
    assert [layer.z_order for layer in definition] == [0, 1]
    assert dict(definition.layer_index) == {"body": 0, "hat": 1}
    assert dict(definition.default_tile) == {"body": "a", "hat": ""}
    assert "hat" in definition and "cape" not in definition


def test_make_layer_definition_rejects_duplicate_names() -> None:
    layers = make_layers()
    layers[1] = replace(layers[1], name="body")
    with pytest.raises(ValueError):
        make_layer_definition("S", 16, 4, layers)


def test_accepts() -> None:
    body, hat = make_layers()
    assert body.accepts("b")
    assert not body.accepts("")
    assert not body.accepts("z")
    assert hat.accepts("")


def test_with_layers_must_keep_names_and_order() -> None:
    definition = make_layer_definition("S", 16, 4, make_layers())
    with pytest.raises(ValueError):
        definition.with_layers(reversed(list(definition)))


def test_rect_for() -> None:
    definition = make_layer_definition("S", 16, 4, make_layers())
    body = definition.layer("body")
    with pytest.raises(KeyError, match="no rect"):
        body.rect_for("a")
    laid = replace(body, value_rects=pmap({"a": Rect(0, 0, 16, 16)}))
    assert laid.rect_for("a") == (0, 0, 16, 16)
