"""
Logging setup for the API process.
"""

import logging
import sys

from assetplace.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = None) -> None:
    """Attach a single stream handler to the root logger.

    Safe to call more than once; later calls only adjust the level.
    """
    if level is None:
        level = get_settings().log_level

    root = logging.getLogger()
    root.setLevel(level.upper())

    if not any(getattr(h, "_assetplace", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._assetplace = True
        root.addHandler(handler)

    # SQL echo is noisy at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
