"""Shared pytest fixtures for gobfuzz tests.

Factory functions live in ``_helpers.py``; this module re-exports them as
pytest fixtures so tests can receive them via dependency injection.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from gobfuzz.build.build_log import get_logger
from gobfuzz.core.config import ConfigManager

from _helpers import (  # noqa: F401 re-export for fixture use
    DECODE_SRC,
    make_config_manager,
    make_go_package,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config_manager(tmp_path: Path) -> ConfigManager:
    """A real ConfigManager backed by default config (no YAML/env file)."""
    return make_config_manager(tmp_path)


@pytest.fixture()
def decode_pkg(tmp_path: Path) -> Path:
    """A module directory holding a package with exactly one fuzz function."""
    return make_go_package(tmp_path / "decode", {"decode.go": DECODE_SRC})


@pytest.fixture(autouse=True)
def _restore_gobfuzz_logger():
    """Drop handlers a test attached to the gobfuzz logger (console, log file)."""
    logger = get_logger()
    handlers, level = list(logger.handlers), logger.level
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
    logger.setLevel(level)
