"""Logging setup for the command-line entry point.

Library modules only ever call ``logging.getLogger(__name__)``; handlers
and levels are configured here, once, by the CLI.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(level: str | int = logging.WARNING) -> None:
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )
