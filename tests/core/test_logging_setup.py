"""Unit tests for src/core/logging_setup.py"""

import logging

from src.core.logging_setup import configure_logging


def test_configure_logging_sets_level() -> None:
    root = logging.getLogger()
    previous = root.level
    try:
        configure_logging("DEBUG")
        assert root.level == logging.DEBUG
        configure_logging(logging.WARNING)
        assert root.level == logging.WARNING
    finally:
        root.setLevel(previous)
