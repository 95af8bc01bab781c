"""Tests for process logging configuration."""

import logging

import pytest
from rich.logging import RichHandler

from storycrafter_mcp.logging_setup import configure_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging_installs_rich_handler():
    configure_logging("debug")

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert any(isinstance(h, RichHandler) for h in root.handlers)
    assert logging.getLogger("httpx").level == logging.WARNING


def test_configure_logging_invalid_level():
    with pytest.raises(ValueError, match="Invalid log level: LOUD"):
        configure_logging("LOUD")
