"""Shared utilities for CLI entrypoints."""

from __future__ import annotations

import argparse
import logging

from rosaiq_server.config import settings


def add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging for troubleshooting",
    )


def configure_logging(verbose: bool = False, level: str | None = None) -> None:
    if verbose:
        resolved = logging.DEBUG
    else:
        resolved = logging.getLevelName((level or settings.LOG_LEVEL).upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO
    logging.basicConfig(level=resolved, format="[%(levelname)s] %(name)s: %(message)s")
    if verbose:
        return
    # Quiet chatty third-party loggers unless explicitly requested.
    for name in (
        "apscheduler",
        "multipart",
        "sqlalchemy.engine",
        "urllib3",
    ):
        logging.getLogger(name).setLevel(logging.WARNING)
