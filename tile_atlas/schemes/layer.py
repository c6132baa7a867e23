"""Layer scheme parsing.

A layer scheme declares the layers of a tile set and the legal values of each
layer::

    {
        "SchemeType": "Layer",
        "SchemeName": "units",
        "TileSize": 16,
        "TilesPerRow": 8,
        "Layers": [
            {"Name": "body", "AllowNull": false, "Values": ["a", "b"], "DefaultValue": "a"},
            {"Name": "hat", "Values": ["cap", "crown"]}
        ]
    }

Validation is fail-fast and follows the field order above. Empty strings in
``Values`` are dropped before counting.
"""

from __future__ import annotations

from typing import Any, List, Mapping

import structlog
from pyrsistent import pvector

from tile_atlas.definition import NULL_VALUE, Layer, LayerDefinition, make_layer_definition
from tile_atlas.errors import SchemeSemanticError, SchemeShapeError
from tile_atlas.schemes._fields import (
    decode_json_object,
    get_array,
    get_non_empty_string,
    get_optional_bool,
    get_optional_string,
    get_positive_int,
    quoted_or_undefined,
)
from tile_atlas.types import JsonObject

logger = structlog.get_logger(__name__)

SCHEME_TYPE = "Layer"


def _parse_values(raw_values: List[Any], prefix: str) -> List[str]:
    values: List[str] = []
    for i, raw in enumerate(raw_values):
        if not isinstance(raw, str):
            raise SchemeShapeError(f"{prefix}Values[{i}] is not a string")
        if not raw:
            continue
        if raw in values:
            raise SchemeSemanticError(f'{prefix}Values contains "{raw}" more than once')
        values.append(raw)
    if not values:
        raise SchemeShapeError(f"{prefix}Values doesn't contain any values")
    return values


def _parse_layer(raw: Any, index: int, seen: set[str]) -> Layer:
    if not isinstance(raw, Mapping):
        raise SchemeShapeError(f"Layers: element {index} is not an object")
    prefix = f"Layers[{index}]."

    name = get_non_empty_string(raw, "Name", prefix)
    if name in seen:
        raise SchemeSemanticError(f'{prefix}Name "{name}" is already used by another layer')
    allow_null = get_optional_bool(raw, "AllowNull", True, prefix)
    values = _parse_values(get_array(raw, "Values", prefix), prefix)

    default_value = get_optional_string(raw, "DefaultValue", prefix)
    if default_value == NULL_VALUE and not allow_null:
        raise SchemeSemanticError(
            f"{prefix}DefaultValue is undefined (null) but AllowNull is false"
        )
    if default_value != NULL_VALUE and default_value not in values:
        raise SchemeSemanticError(f"{prefix}DefaultValue isn't an element of Values")

    return Layer(
        name=name,
        z_order=index,
        values=pvector(values),
        allow_null=allow_null,
        default_value=default_value,
    )


def parse_layer_scheme(json: JsonObject) -> LayerDefinition:
    """Validate a decoded layer scheme and build its :class:`LayerDefinition`.

    Arguments:
        json: Decoded top-level JSON object.

    Returns:
        LayerDefinition: Definition without rects; run it through
        :func:`tile_atlas.layout.compute_layout` before compositing.

    Raises:
        SchemeShapeError: A field is missing or has the wrong type.
        SchemeSemanticError: Fields contradict each other.
    """
    if json.get("SchemeType") != SCHEME_TYPE:
        raise SchemeShapeError(
            f'Bad SchemeType, should be "{SCHEME_TYPE}" but is '
            + quoted_or_undefined(json, "SchemeType")
        )
    name = get_non_empty_string(json, "SchemeName")
    tile_size = get_positive_int(json, "TileSize")
    tiles_per_row = get_positive_int(json, "TilesPerRow")
    raw_layers = get_array(json, "Layers")
    if not raw_layers:
        raise SchemeShapeError("Layers doesn't contain any layers")

    layers: List[Layer] = []
    seen: set[str] = set()
    for i, raw in enumerate(raw_layers):
        layer = _parse_layer(raw, i, seen)
        seen.add(layer.name)
        layers.append(layer)

    definition = make_layer_definition(name, tile_size, tiles_per_row, layers)
    logger.debug(
        "layer scheme parsed",
        scheme=name,
        tile_size=tile_size,
        tiles_per_row=tiles_per_row,
        layers=[(layer.name, len(layer.values)) for layer in definition],
    )
    return definition


def load_layer_scheme(text: str | bytes) -> LayerDefinition:
    """Decode layer scheme JSON text and parse it."""
    return parse_layer_scheme(decode_json_object(text, "layer scheme"))
