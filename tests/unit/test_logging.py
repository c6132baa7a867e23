import logging

import pytest

from tile_atlas.config.logging import configure_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    atlas_level = logging.getLogger("tile_atlas").level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("tile_atlas").setLevel(atlas_level)


def test_quiet_by_default() -> None:
    configure_logging()
    assert logging.getLogger("tile_atlas").level == logging.WARNING
    assert not logging.getLogger("tile_atlas.pipeline").isEnabledFor(logging.INFO)


def test_verbose_enables_debug() -> None:
    configure_logging(verbose=True)
    assert logging.getLogger("tile_atlas").level == logging.DEBUG


def test_single_stderr_handler() -> None:
    configure_logging(log_json=True)
    configure_logging(log_json=True)
    assert len(logging.getLogger().handlers) == 1
