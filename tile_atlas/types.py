"""Common type aliases and enumerations.

``DiagnosticSink`` is the extension point through which the pipeline reports
progress and failures; the core never talks to a terminal or UI directly.
"""

from enum import StrEnum, auto
from typing import Any, Callable, Mapping

import numpy as np
import numpy.typing as npt

# Straight (non-premultiplied) RGBA pixels, shape (height, width, 4).
Atlas = npt.NDArray[np.uint8]

LayerName = str
LayerValue = str

# A decoded JSON object, as produced by ``json.loads``.
JsonObject = Mapping[str, Any]


class Stage(StrEnum):
    """Pipeline stages, in execution order."""

    LOAD = auto()
    LAYER_SCHEME = auto()
    TILE_SCHEME = auto()
    LAYOUT = auto()
    COMPOSITE = auto()
    SAVE = auto()


class Severity(StrEnum):
    INFO = auto()
    WARNING = auto()
    ERROR = auto()


DiagnosticSink = Callable[[Stage, str, Severity], None]
