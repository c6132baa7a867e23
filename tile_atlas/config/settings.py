from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class GeneratorConfig:
    """Run options for the ``tile-atlas`` command line.

    Attributes:
        verbose: Log layer rects and tile dumps at DEBUG.
        log_json: Emit JSON log lines instead of console output.
        layout_path: If set, the computed rect layout is written here as JSON.
        overwrite: Replace an existing output image instead of refusing.
    """

    verbose: bool = False
    log_json: bool = False
    layout_path: Optional[Path] = None
    overwrite: bool = False

    @classmethod
    def from_cli(
        cls,
        *,
        verbose: bool = False,
        log_json: bool = False,
        layout_path: Optional[str] = None,
        overwrite: bool = False,
    ) -> "GeneratorConfig":
        return cls(
            verbose=verbose,
            log_json=log_json,
            layout_path=Path(layout_path) if layout_path else None,
            overwrite=overwrite,
        )
