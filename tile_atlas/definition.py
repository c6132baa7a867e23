"""Immutable layer definition and tile records.

A :class:`LayerDefinition` is produced once by
:func:`tile_atlas.schemes.layer.parse_layer_scheme` and never mutated.
:func:`tile_atlas.layout.compute_layout` returns a *new* definition with
``value_rects`` filled in, so a definition handed to the compositor is always
either fully laid out or not laid out at all.

Design notes:

* Layers need both name lookup and a stable paint order. The order lives in
  ``layers_ordered`` (a ``pyrsistent.PVector``); ``layer_index`` maps a name to
  its position. Neither relies on dict iteration order.
* A layer's position in ``layers_ordered`` is its ``z_order``: the first
  declared layer is painted first (bottom) and packed first (top row band).
* A :data:`Tile` maps every layer name to a value. The empty string means the
  layer paints nothing for that tile.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator, NamedTuple, Sequence

from pyrsistent import pmap, pvector
from pyrsistent.typing import PMap, PVector

from tile_atlas.types import LayerName, LayerValue

NULL_VALUE: LayerValue = ""

Tile = PMap[LayerName, LayerValue]


class Rect(NamedTuple):
    """Pixel rectangle in base-atlas space."""

    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class Layer:
    """One visual axis (body, color, ...) and its legal values.

    Attributes:
        name (str): Unique key within the owning definition.
        z_order (int): Index in ``LayerDefinition.layers_ordered``.
        allow_null (bool): Whether a tile may leave this layer empty.
        values (PVector[str]): Legal non-empty values, in packing order.
        default_value (str): Value used when a tile does not mention the layer;
            empty means null.
        value_rects (PMap[str, Rect]): Source rect per value. Empty until the
            definition has gone through layout.
    """

    name: LayerName
    z_order: int
    values: PVector[LayerValue]
    allow_null: bool = True
    default_value: LayerValue = NULL_VALUE
    value_rects: PMap[LayerValue, Rect] = field(default_factory=pmap)

    def accepts(self, value: LayerValue) -> bool:
        if value == NULL_VALUE:
            return self.allow_null
        return value in self.values

    def rect_for(self, value: LayerValue) -> Rect:
        try:
            return self.value_rects[value]
        except KeyError:
            raise KeyError(
                f'Layer "{self.name}" has no rect for value "{value}"'
            ) from None


@dataclass(frozen=True)
class LayerDefinition:
    """Parsed layer scheme.

    Attributes:
        name (str): ``SchemeName``; tile schemes reference it.
        tile_size (int): Edge length in pixels of every sprite and output tile.
        tiles_per_row (int): Output atlas width in tiles.
        layers_ordered (PVector[Layer]): Layers in declaration order.
        layer_index (PMap[str, int]): Layer name to position in ``layers_ordered``.
        default_tile (Tile): Layer name to that layer's default value.
    """

    name: str
    tile_size: int
    tiles_per_row: int
    layers_ordered: PVector[Layer]
    layer_index: PMap[LayerName, int]
    default_tile: Tile

    @property
    def layers(self) -> PMap[LayerName, Layer]:
        return pmap({name: self.layers_ordered[i] for name, i in self.layer_index.items()})

    @property
    def layer_names(self) -> tuple[LayerName, ...]:
        return tuple(layer.name for layer in self.layers_ordered)

    @property
    def is_laid_out(self) -> bool:
        return all(
            len(layer.value_rects) == len(layer.values) for layer in self.layers_ordered
        )

    def __contains__(self, name: object) -> bool:
        return name in self.layer_index

    def __iter__(self) -> Iterator[Layer]:
        return iter(self.layers_ordered)

    def layer(self, name: LayerName) -> Layer:
        return self.layers_ordered[self.layer_index[name]]

    def with_layers(self, layers: Iterable[Layer]) -> "LayerDefinition":
        """Return a copy whose layers are replaced, keeping names and order."""
        new_layers = pvector(layers)
        if tuple(layer.name for layer in new_layers) != self.layer_names:
            raise ValueError("Replacement layers must keep names and order")
        return replace(self, layers_ordered=new_layers)


def make_layer_definition(
    name: str, tile_size: int, tiles_per_row: int, layers: Sequence[Layer]
) -> LayerDefinition:
    """
    Build a definition from layers in declaration order.

    ``z_order`` is reassigned from position and the default tile is derived
    from each layer's ``default_value``. Names must already be unique.
    """
    ordered = pvector(replace(layer, z_order=i) for i, layer in enumerate(layers))
    index = pmap({layer.name: i for i, layer in enumerate(ordered)})
    if len(index) != len(ordered):
        raise ValueError("Layer names must be unique")
    default_tile = pmap({layer.name: layer.default_value for layer in ordered})
    return LayerDefinition(
        name=name,
        tile_size=tile_size,
        tiles_per_row=tiles_per_row,
        layers_ordered=ordered,
        layer_index=index,
        default_tile=default_tile,
    )
