"""Parsers for the two JSON scheme documents.

* :mod:`tile_atlas.schemes.layer` builds a :class:`~tile_atlas.definition.LayerDefinition`.
* :mod:`tile_atlas.schemes.tile` expands tile ranges against that definition.
"""

from tile_atlas.schemes.layer import load_layer_scheme, parse_layer_scheme
from tile_atlas.schemes.tile import ensure_capacity, load_tile_scheme, parse_tile_scheme

__all__ = [
    "ensure_capacity",
    "load_layer_scheme",
    "load_tile_scheme",
    "parse_layer_scheme",
    "parse_tile_scheme",
]
