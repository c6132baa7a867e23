"""Tile scheme parsing.

A tile scheme assigns layer values to output tiles by inclusive index range::

    {
        "SchemeType": "Tile",
        "LayerSchemeName": "units",
        "TileCount": 4,
        "Tiles": [
            {"Start": 0, "End": 3, "LayerValues": {"body": "b"}},
            {"Start": 2, "LayerValues": {"hat": "crown"}}
        ]
    }

Ranges are applied in order. Each index in a range is reset to the layer
definition's default tile before the range's ``LayerValues`` are applied, so
a later range fully replaces an earlier one where they overlap.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Tuple

import structlog
from pyrsistent import pvector
from pyrsistent.typing import PVector

from tile_atlas.definition import NULL_VALUE, LayerDefinition, Tile
from tile_atlas.errors import SchemeSemanticError, SchemeShapeError
from tile_atlas.schemes._fields import (
    MISSING,
    as_int,
    decode_json_object,
    get_array,
    get_non_empty_string,
    is_number,
    quoted_or_undefined,
)
from tile_atlas.types import JsonObject

logger = structlog.get_logger(__name__)

SCHEME_TYPE = "Tile"


def ensure_capacity(tiles: List[Tile], index: int, default_tile: Tile) -> None:
    """
    Grow ``tiles`` in place so that ``index`` is a valid position.

    New slots are filled with ``default_tile``. Does nothing if the list is
    already long enough.
    """
    missing = index + 1 - len(tiles)
    if missing > 0:
        tiles.extend([default_tile] * missing)


def _parse_tile_count(json: JsonObject) -> Optional[int]:
    raw = json.get("TileCount")
    if raw is None:
        return None
    if not is_number(raw):
        raise SchemeShapeError("TileCount is not a number")
    count = as_int(raw)
    if count is None or count <= 0:
        raise SchemeShapeError("TileCount is 0, negative or not whole")
    return count


def _count_mismatch(generated: int, tile_count: int) -> SchemeSemanticError:
    return SchemeSemanticError(
        f"Generated tile count ({generated}) does not match TileCount ({tile_count})"
    )


def _parse_range(tile_def: JsonObject, prefix: str) -> Tuple[int, int]:
    raw_start = tile_def.get("Start", MISSING)
    if not is_number(raw_start):
        raise SchemeShapeError(f"{prefix}Start is either undefined or not a number")
    start = as_int(raw_start)
    if start is None or start < 0:
        raise SchemeShapeError(f"{prefix}Start is negative or not whole")

    raw_end = tile_def.get("End")
    if raw_end is None:
        return start, start
    if not is_number(raw_end):
        raise SchemeShapeError(f"{prefix}End is not a number")
    end = as_int(raw_end)
    if end is None or end < 0:
        raise SchemeShapeError(f"{prefix}End is negative or not whole")
    if end < start:
        start, end = end, start
    return start, end


def _build_tile(
    layer_values: JsonObject, definition: LayerDefinition, prefix: str
) -> Tile:
    tile = definition.default_tile
    for layer_name, raw_value in layer_values.items():
        if layer_name not in definition:
            raise SchemeSemanticError(
                f'{prefix}LayerValues has value for unknown layer "{layer_name}"'
            )
        if raw_value is None:
            raw_value = NULL_VALUE
        if not isinstance(raw_value, str):
            raise SchemeShapeError(
                f'{prefix}LayerValues value for layer "{layer_name}" is not a string'
            )
        layer = definition.layer(layer_name)
        if raw_value == NULL_VALUE and not layer.allow_null:
            raise SchemeSemanticError(
                f'{prefix}LayerValues value for layer "{layer_name}" is null, '
                "but layer doesn't allow null"
            )
        if not layer.accepts(raw_value):
            raise SchemeSemanticError(
                f'{prefix}LayerValues value "{raw_value}" for layer "{layer_name}" is invalid'
            )
        tile = tile.set(layer_name, raw_value)
    return tile


def parse_tile_scheme(json: JsonObject, definition: LayerDefinition) -> PVector[Tile]:
    """Validate a decoded tile scheme against ``definition`` and expand its ranges.

    Arguments:
        json: Decoded top-level JSON object.
        definition: Layer definition named by ``LayerSchemeName``.

    Returns:
        PVector[Tile]: One tile per output index; every tile holds exactly one
        value per layer of ``definition``.

    Raises:
        SchemeShapeError: A field is missing or has the wrong type.
        SchemeSemanticError: The scheme references unknown layers or values,
            names another layer scheme, or does not produce ``TileCount`` tiles.
    """
    if json.get("SchemeType") != SCHEME_TYPE:
        raise SchemeShapeError(
            f'Bad SchemeType, should be "{SCHEME_TYPE}" but is '
            + quoted_or_undefined(json, "SchemeType")
        )
    layer_scheme_name = get_non_empty_string(json, "LayerSchemeName")
    if layer_scheme_name != definition.name:
        raise SchemeSemanticError(
            f'Bad LayerSchemeName, should be "{definition.name}" '
            f'but is "{layer_scheme_name}"'
        )

    tile_count = _parse_tile_count(json)
    tiles: List[Tile] = []
    if tile_count is not None:
        ensure_capacity(tiles, tile_count - 1, definition.default_tile)

    tile_defs = get_array(json, "Tiles")
    if not tile_defs:
        raise SchemeShapeError("Tiles doesn't contain any tile ranges")

    generated = 0
    for i, tile_def in enumerate(tile_defs):
        if not isinstance(tile_def, Mapping):
            raise SchemeShapeError(f"Tiles: element {i} is not an object")
        prefix = f"Tiles[{i}]."
        start, end = _parse_range(tile_def, prefix)
        layer_values: Any = tile_def.get("LayerValues")
        if not isinstance(layer_values, Mapping):
            raise SchemeShapeError(
                f"{prefix}LayerValues is either undefined or not an object"
            )
        tile = _build_tile(layer_values, definition, prefix)
        logger.debug("tile range", index=i, start=start, end=end, tile=dict(tile))

        if tile_count is not None and end >= tile_count:
            raise _count_mismatch(end + 1, tile_count)
        ensure_capacity(tiles, end, definition.default_tile)
        for index in range(start, end + 1):
            tiles[index] = tile
        generated = max(generated, end + 1)

    if tile_count is not None and generated != tile_count:
        raise _count_mismatch(generated, tile_count)
    return pvector(tiles)


def load_tile_scheme(text: str | bytes, definition: LayerDefinition) -> PVector[Tile]:
    """Decode tile scheme JSON text and parse it against ``definition``."""
    return parse_tile_scheme(decode_json_object(text, "tile scheme"), definition)
