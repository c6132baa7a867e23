"""Shared pytest fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict

import pytest
from click.testing import CliRunner

from tests.builders import GREEN, RED, make_atlas
from tile_atlas.utils.image import save_atlas


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def write_json(tmp_path: Path) -> Callable[[str, Dict[str, Any]], Path]:
    def _write(name: str, doc: Dict[str, Any]) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(doc), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def base_png(tmp_path: Path) -> Path:
    """32x16 base atlas: RED cell then GREEN cell."""
    path = tmp_path / "base.png"
    save_atlas(make_atlas([[RED, GREEN]]), path)
    return path
