"""Exception hierarchy.

Stage functions raise these; :func:`tile_atlas.pipeline.generate_atlas` turns
them into a :class:`~tile_atlas.pipeline.GenerationResult`. ``kind`` lets a
caller tell "your scheme is wrong" apart from "a file could not be accessed".
"""


class TileAtlasError(Exception):
    kind: str = "internal"


class SchemeError(TileAtlasError, ValueError):
    """A layer or tile scheme is invalid."""

    kind = "schema"


class SchemeShapeError(SchemeError):
    """Missing required field or wrong JSON type."""


class SchemeSemanticError(SchemeError):
    """Fields are individually well formed but inconsistent with each other."""


class LayoutError(TileAtlasError, ValueError):
    """The base atlas cannot hold every declared layer value."""

    kind = "layout"


class CompositeError(TileAtlasError, RuntimeError):
    """Internal invariant broken while compositing."""

    kind = "internal"


class AtlasIOError(TileAtlasError, OSError):
    """An input could not be read or decoded, or the output could not be written."""

    kind = "io"
