"""Fixtures for the CLI tests."""

import logging
from collections.abc import Iterator

import pytest

from gitspaces.cli.bootstrap import ROOT_LOGGER_NAME


@pytest.fixture(autouse=True)
def restore_logger() -> Iterator[None]:
    """Undo configure_logging() so later tests see default propagation."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate
