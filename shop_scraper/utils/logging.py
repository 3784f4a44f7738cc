from __future__ import annotations

import logging
import os
import sys

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def resolve_level(level: str | int | None) -> int:
    if level is None:
        level = os.getenv("SCRAPER_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        return _LEVELS.get(level.upper(), logging.INFO)
    return level


def setup_logging(level: str | int | None = None) -> None:
    """
    Configure application logging: one stderr handler, so diagnostics never
    mix with anything a caller pipes from stdout.
    """
    logging.basicConfig(
        level=resolve_level(level),
        format=_FORMAT,
        stream=sys.stderr,
    )