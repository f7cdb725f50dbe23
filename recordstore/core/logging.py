"""Logging setup for apps and scripts."""
from __future__ import annotations

import logging

from .config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Install a root handler once; later calls only adjust the level."""
    lvl = (level or get_settings().log_level).upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=lvl, format=LOG_FORMAT)
    logging.getLogger("recordstore").setLevel(lvl)
