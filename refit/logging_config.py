"""Logging setup shared by scripts and embedding applications."""

import logging
import sys

from config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(debug: bool = None) -> None:
    """Configure root logging to stdout, DEBUG when settings.debug is on."""
    if debug is None:
        debug = settings.debug

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
