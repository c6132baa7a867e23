"""End-to-end atlas generation.

Stages run strictly in order and the first failure ends the run::

    layer scheme -> tile scheme -> layout -> composite

:func:`generate_atlas` works on in-memory inputs. :func:`generate_atlas_files`
wraps it with file loading before and PNG encoding after; nothing is written
unless every stage succeeds.

Stage functions raise :class:`~tile_atlas.errors.TileAtlasError` subclasses;
this module is the only place those are turned into a
:class:`GenerationResult`. Progress and failures are reported through a
:data:`~tile_atlas.types.DiagnosticSink`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import structlog
from pyrsistent.typing import PVector

from tile_atlas.definition import LayerDefinition, Tile
from tile_atlas.errors import AtlasIOError, CompositeError, TileAtlasError
from tile_atlas.layout import compute_layout
from tile_atlas.renderer.compositor import composite_tiles
from tile_atlas.schemes._fields import decode_json_object
from tile_atlas.schemes.layer import parse_layer_scheme
from tile_atlas.schemes.tile import parse_tile_scheme
from tile_atlas.types import Atlas, DiagnosticSink, JsonObject, Severity, Stage
from tile_atlas.utils.image import PathLike, atlas_size, load_atlas, save_atlas

logger = structlog.get_logger(__name__)

SchemeInput = Union[JsonObject, str, bytes]

_LOG_METHODS = {
    Severity.INFO: "info",
    Severity.WARNING: "warning",
    Severity.ERROR: "error",
}


def log_sink(stage: Stage, message: str, severity: Severity) -> None:
    """Default sink: forward to the ``tile_atlas.pipeline`` logger."""
    getattr(logger, _LOG_METHODS[severity])(message, stage=str(stage))


@dataclass
class CollectingSink:
    """Sink that keeps every diagnostic in memory."""

    records: List[Tuple[Stage, str, Severity]] = field(default_factory=list)

    def __call__(self, stage: Stage, message: str, severity: Severity) -> None:
        self.records.append((stage, message, severity))

    def messages(self, severity: Optional[Severity] = None) -> List[str]:
        return [m for _, m, s in self.records if severity is None or s == severity]


@dataclass(frozen=True, eq=False)
class GenerationResult:
    """Outcome of one pipeline run.

    Attributes:
        ok: Whether every stage succeeded.
        stage: Last stage reached; on failure, the stage that failed.
        message: Human readable summary or the failing stage's error.
        error_kind: ``"schema"``, ``"layout"``, ``"internal"`` or ``"io"`` on
            failure, None on success.
        atlas: Output pixels on success, None otherwise.
        definition: Laid out definition, when layout was reached.
        tiles: Parsed tiles, when the tile scheme was parsed.
    """

    ok: bool
    stage: Stage
    message: str
    error_kind: Optional[str] = None
    atlas: Optional[Atlas] = None
    definition: Optional[LayerDefinition] = None
    tiles: Optional[PVector[Tile]] = None

    @classmethod
    def failure(
        cls, stage: Stage, error: TileAtlasError, **partial: Any
    ) -> "GenerationResult":
        return cls(ok=False, stage=stage, message=str(error), error_kind=error.kind, **partial)


def _as_json(scheme: SchemeInput, what: str) -> JsonObject:
    if isinstance(scheme, (str, bytes)):
        return decode_json_object(scheme, what)
    return scheme


def layout_to_json(definition: LayerDefinition) -> Dict[str, Any]:
    """Serializable view of a laid out definition, layers in z-order."""
    return {
        "SchemeName": definition.name,
        "TileSize": definition.tile_size,
        "Layers": [
            {
                "Name": layer.name,
                "ZOrder": layer.z_order,
                "Rects": {
                    value: list(layer.rect_for(value)) for value in layer.values
                },
            }
            for layer in definition
        ],
    }


def generate_atlas(
    base_atlas: Atlas,
    layer_scheme: SchemeInput,
    tile_scheme: SchemeInput,
    sink: Optional[DiagnosticSink] = None,
) -> GenerationResult:
    """Run the four core stages on in-memory inputs.

    Arguments:
        base_atlas: Decoded base atlas pixels.
        layer_scheme: Layer scheme as a decoded object or JSON text.
        tile_scheme: Tile scheme as a decoded object or JSON text.
        sink: Receives progress and failure diagnostics; defaults to
            :func:`log_sink`.

    Returns:
        GenerationResult: ``atlas`` is set only if every stage succeeded.
    """
    report = sink or log_sink
    stage = Stage.LAYER_SCHEME
    definition: Optional[LayerDefinition] = None
    tiles: Optional[PVector[Tile]] = None
    try:
        report(stage, "Parsing layer scheme", Severity.INFO)
        definition = parse_layer_scheme(_as_json(layer_scheme, "layer scheme"))
        report(
            stage,
            f'Layer scheme "{definition.name}" parsed: {len(definition.layers_ordered)} layers',
            Severity.INFO,
        )

        stage = Stage.TILE_SCHEME
        report(stage, "Parsing tile scheme", Severity.INFO)
        tiles = parse_tile_scheme(_as_json(tile_scheme, "tile scheme"), definition)
        report(stage, f"Tile scheme parsed: {len(tiles)} tiles", Severity.INFO)

        stage = Stage.LAYOUT
        width, height = atlas_size(base_atlas)
        report(stage, f"Laying out layer rects on a {width}x{height} atlas", Severity.INFO)
        definition = compute_layout(definition, width, height)

        stage = Stage.COMPOSITE
        report(stage, "Compositing tiles", Severity.INFO)
        atlas = composite_tiles(base_atlas, definition, tiles)
    except TileAtlasError as exc:
        report(stage, str(exc), Severity.ERROR)
        return GenerationResult.failure(stage, exc, definition=definition, tiles=tiles)

    out_width, out_height = atlas_size(atlas)
    message = f"Generated {len(tiles)} tiles into a {out_width}x{out_height} atlas"
    report(stage, message, Severity.INFO)
    return GenerationResult(
        ok=True,
        stage=stage,
        message=message,
        atlas=atlas,
        definition=definition,
        tiles=tiles,
    )


def read_input(path: PathLike, what: str) -> bytes:
    try:
        with open(path, "rb") as fh:
            return fh.read()
    except OSError as exc:
        raise AtlasIOError(f'Failed to open {what} file "{path}": {exc}') from exc


def _write_layout(definition: LayerDefinition, path: PathLike) -> None:
    try:
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(layout_to_json(definition), fh, indent=2)
    except OSError as exc:
        raise AtlasIOError(f'Could not write layout "{path}": {exc}') from exc


def generate_atlas_files(
    base_path: PathLike,
    layer_path: PathLike,
    tile_path: PathLike,
    output_path: PathLike,
    sink: Optional[DiagnosticSink] = None,
    overwrite: bool = True,
    layout_path: Optional[PathLike] = None,
) -> GenerationResult:
    """Load inputs from disk, run :func:`generate_atlas`, save the PNG.

    I/O failures come back with ``error_kind="io"``. The output image (and the
    optional layout JSON) are written only after every stage has succeeded.
    """
    report = sink or log_sink

    if not overwrite and Path(output_path).exists():
        error = AtlasIOError(f'Output image "{output_path}" already exists')
        report(Stage.SAVE, str(error), Severity.ERROR)
        return GenerationResult.failure(Stage.SAVE, error)

    try:
        base_atlas = load_atlas(base_path)
        report(Stage.LOAD, f'Loaded base image "{base_path}"', Severity.INFO)
        layer_text = read_input(layer_path, "layer scheme")
        report(Stage.LOAD, f'Read layer scheme from "{layer_path}"', Severity.INFO)
        tile_text = read_input(tile_path, "tile scheme")
        report(Stage.LOAD, f'Read tile scheme from "{tile_path}"', Severity.INFO)
    except AtlasIOError as exc:
        report(Stage.LOAD, str(exc), Severity.ERROR)
        return GenerationResult.failure(Stage.LOAD, exc)

    result = generate_atlas(base_atlas, layer_text, tile_text, sink=report)
    if not result.ok:
        return result
    atlas, definition = result.atlas, result.definition
    if atlas is None or definition is None:
        raise CompositeError("Successful run produced no atlas or layout")

    # Layout first, so a failed layout write never leaves an image behind.
    try:
        if layout_path is not None:
            _write_layout(definition, layout_path)
        try:
            save_atlas(atlas, output_path)
        except AtlasIOError:
            if layout_path is not None:
                Path(layout_path).unlink(missing_ok=True)
            raise
    except AtlasIOError as exc:
        report(Stage.SAVE, str(exc), Severity.ERROR)
        return GenerationResult.failure(
            Stage.SAVE, exc, definition=definition, tiles=result.tiles
        )

    report(Stage.SAVE, f'Saved tiles image to "{output_path}"', Severity.INFO)
    return GenerationResult(
        ok=True,
        stage=Stage.SAVE,
        message=result.message,
        atlas=atlas,
        definition=definition,
        tiles=result.tiles,
    )


def describe_tiles(tiles: Sequence[Tile], layer_names: Sequence[str]) -> List[str]:
    """One ``index: layer=value, ...`` line per tile, layers in z-order."""
    return [
        f"{i}: " + ", ".join(f"{name}={tile[name] or '-'}" for name in layer_names)
        for i, tile in enumerate(tiles)
    ]
