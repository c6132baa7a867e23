"""Rendering subpackage.

Turns a laid out :class:`~tile_atlas.definition.LayerDefinition` plus a tile
sequence into a packed output atlas. The renderer focuses on:

* Deterministic layering: layers are painted in z-order, lowest first.
* Bit-reproducible source-over blending done in NumPy integer math rather
  than through an imaging library's blitter.

See :mod:`tile_atlas.renderer.compositor` for the composition routines and
:mod:`tile_atlas.utils.image` for the pixel-level blend.
"""

from tile_atlas.renderer.compositor import (
    blit,
    composite_tiles,
    output_size,
    tile_origin,
)

__all__ = ["blit", "composite_tiles", "output_size", "tile_origin"]
