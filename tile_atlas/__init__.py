"""tile_atlas: composite layered sprites into a packed tile atlas.

Typical use::

    from tile_atlas import generate_atlas

    result = generate_atlas(base_pixels, layer_scheme, tile_scheme)
    if result.ok:
        ...  # result.atlas is an RGBA numpy array
"""

__version__ = "0.1.0"

from tile_atlas.definition import Layer, LayerDefinition, Rect, Tile  # noqa: E402
from tile_atlas.errors import (  # noqa: E402
    AtlasIOError,
    CompositeError,
    LayoutError,
    SchemeError,
    SchemeSemanticError,
    SchemeShapeError,
    TileAtlasError,
)
from tile_atlas.layout import compute_layout  # noqa: E402
from tile_atlas.pipeline import (  # noqa: E402
    CollectingSink,
    GenerationResult,
    generate_atlas,
    generate_atlas_files,
)
from tile_atlas.renderer.compositor import composite_tiles  # noqa: E402
from tile_atlas.schemes.layer import load_layer_scheme, parse_layer_scheme  # noqa: E402
from tile_atlas.schemes.tile import load_tile_scheme, parse_tile_scheme  # noqa: E402

__all__ = [
    "AtlasIOError",
    "CollectingSink",
    "CompositeError",
    "GenerationResult",
    "Layer",
    "LayerDefinition",
    "LayoutError",
    "Rect",
    "SchemeError",
    "SchemeSemanticError",
    "SchemeShapeError",
    "Tile",
    "TileAtlasError",
    "__version__",
    "compute_layout",
    "composite_tiles",
    "generate_atlas",
    "generate_atlas_files",
    "load_layer_scheme",
    "load_tile_scheme",
    "parse_layer_scheme",
    "parse_tile_scheme",
]
