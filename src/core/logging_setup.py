"""Logging configuration for running the backend (library code only ever calls `logging.getLogger(__name__)`)."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | int = logging.INFO) -> None:
    """Console logging on the root logger. Calling it again only changes the level."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
