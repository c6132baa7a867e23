"""Source rect layout for layer values.

The base atlas is read as a grid of ``tile_size`` cells. Layers are placed in
z-order, one row band each: a layer's values run left to right from column 0,
wrapping onto further rows as needed. After its last value the row always
advances, so a layer that exactly fills its last row leaves that next row
blank. This keeps the atlas easy to author by hand; it does not try to
pack densely.

Example with a 4 column atlas::

    row 0 | body:a | body:b | body:c | body:d |
    row 1 | body:e |                              <- rest of the row unused
    row 2 | hat:cap | hat:crown |
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List

import structlog
from pyrsistent import pmap

from tile_atlas.definition import Layer, LayerDefinition, Rect
from tile_atlas.errors import LayoutError

logger = structlog.get_logger(__name__)


def grid_bounds(width: int, height: int, tile_size: int) -> tuple[int, int]:
    """Return ``(max_col, max_row)``, the last usable 0-based cell indices.

    Either is -1 when the atlas is narrower or shorter than one tile.
    """
    return width // tile_size - 1, height // tile_size - 1


def compute_layout(definition: LayerDefinition, width: int, height: int) -> LayerDefinition:
    """
    Assign a source rect to every value of every layer.

    Arguments:
        definition: Parsed layer definition; left untouched.
        width: Base atlas width in pixels.
        height: Base atlas height in pixels.

    Returns:
        LayerDefinition: Copy of ``definition`` with ``value_rects`` filled.

    Raises:
        LayoutError: The atlas has too few rows for the declared values. No
            partial layout is returned.
    """
    tile_size = definition.tile_size
    max_col, max_row = grid_bounds(width, height, tile_size)
    logger.debug("layout bounds", max_col=max_col, max_row=max_row, tile_size=tile_size)

    laid_out: List[Layer] = []
    row = 0
    for layer in definition:
        rects: Dict[str, Rect] = {}
        col = 0
        for value in layer.values:
            if row > max_row or max_col < 0:
                raise LayoutError(
                    f'Atlas too small: layer "{layer.name}" value "{value}" needs '
                    f"row {row}, but a {width}x{height} atlas has "
                    f"{max(max_row + 1, 0)} rows of {tile_size}px tiles"
                )
            rects[value] = Rect(col * tile_size, row * tile_size, tile_size, tile_size)
            col += 1
            if col > max_col:
                col = 0
                row += 1
        # Layers never share a row. An exact fill leaves the next row blank.
        row += 1
        laid_out.append(replace(layer, value_rects=pmap(rects)))
        logger.debug(
            "layer rects",
            layer=layer.name,
            rects={value: tuple(rect) for value, rect in rects.items()},
        )

    return definition.with_layers(laid_out)
