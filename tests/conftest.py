from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest

from sqlmigrate.utils.logging import ROOT_LOGGER_NAME, set_correlation_id

here = Path(__file__).parent
root_path = here.parent


@pytest.fixture(autouse=True)
def reset_sqlmigrate_logging() -> Generator[None, None, None]:
    """Undo handler and propagation changes made by ``configure_logging``."""
    yield
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
    set_correlation_id(None)


@pytest.fixture
def migrations_dir(tmp_path: Path) -> Path:
    path = tmp_path / "migrations"
    path.mkdir()
    return path
