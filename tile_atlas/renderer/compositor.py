from __future__ import annotations

import math
from typing import Sequence, Tuple

import structlog

from tile_atlas.definition import NULL_VALUE, LayerDefinition, Rect, Tile
from tile_atlas.errors import CompositeError
from tile_atlas.types import Atlas
from tile_atlas.utils.image import atlas_size, blank_atlas, source_over

logger = structlog.get_logger(__name__)


def output_size(definition: LayerDefinition, tile_count: int) -> Tuple[int, int]:
    """Return the output atlas ``(width, height)`` in pixels for ``tile_count`` tiles."""
    rows = math.ceil(tile_count / definition.tiles_per_row)
    return (
        definition.tiles_per_row * definition.tile_size,
        rows * definition.tile_size,
    )


def tile_origin(definition: LayerDefinition, index: int) -> Tuple[int, int]:
    """Top-left pixel of output tile ``index``; tiles fill rows left to right."""
    col = index % definition.tiles_per_row
    row = index // definition.tiles_per_row
    return col * definition.tile_size, row * definition.tile_size


def blit(canvas: Atlas, base_atlas: Atlas, rect: Rect, dest: Tuple[int, int]) -> None:
    """Source-over ``rect`` of ``base_atlas`` onto ``canvas`` at ``dest``, in place."""
    x, y, w, h = rect
    dx, dy = dest
    src = base_atlas[y : y + h, x : x + w]
    dst = canvas[dy : dy + h, dx : dx + w]
    canvas[dy : dy + h, dx : dx + w] = source_over(src, dst)


def composite_tiles(
    base_atlas: Atlas, definition: LayerDefinition, tiles: Sequence[Tile]
) -> Atlas:
    """
    Render every tile into a packed output atlas.

    Layers are painted in z-order (lowest first) across all tiles. A tile's
    null layers paint nothing, so a tile whose every layer is null stays fully
    transparent.

    Arguments:
        base_atlas: Source sprites, RGBA.
        definition: Laid out definition (see :func:`tile_atlas.layout.compute_layout`).
        tiles: Tile records, index 0 first.

    Returns:
        Atlas: ``tiles_per_row`` tiles wide, as many rows as needed.

    Raises:
        CompositeError: ``definition`` has no rects, or a rect or tile falls
            outside its buffer.
    """
    if not definition.is_laid_out:
        raise CompositeError(f'Layer definition "{definition.name}" has not been laid out')

    width, height = output_size(definition, len(tiles))
    canvas = blank_atlas(width, height)
    max_row = height // definition.tile_size - 1
    base_width, base_height = atlas_size(base_atlas)

    for layer in definition:
        for index, tile in enumerate(tiles):
            dest = tile_origin(definition, index)
            if dest[1] // definition.tile_size > max_row:
                raise CompositeError(
                    f"Calculation error: tile {index} lands on row "
                    f"{dest[1] // definition.tile_size}, past the last row {max_row}"
                )
            value = tile[layer.name]
            if value == NULL_VALUE:
                continue
            rect = layer.rect_for(value)
            if rect.x + rect.width > base_width or rect.y + rect.height > base_height:
                raise CompositeError(
                    f'Rect {tuple(rect)} for layer "{layer.name}" value "{value}" '
                    f"is outside the {base_width}x{base_height} base atlas"
                )
            blit(canvas, base_atlas, rect, dest)

    logger.debug("composited", tiles=len(tiles), width=width, height=height)
    return canvas
