from __future__ import annotations

import sys

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def _reset_loguru():
    """Tests that configure logging bind loguru to captured streams; undo that."""
    yield
    logger.remove()
    logger.add(sys.__stderr__, level="WARNING")
