"""Logging setup shared by the demo script and hosting applications."""

import logging
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure root logging.

    Falls back to the level from settings when none is given.
    """
    if level is None:
        from .settings import get_settings
        level = get_settings().log_level

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w'))

    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )
