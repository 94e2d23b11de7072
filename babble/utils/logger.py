"""
Logging setup shared by the app and routers.
"""

import logging
import sys

from babble.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(name: str, level: str | None = None) -> logging.Logger:
    """
    Get a logger with a stream handler attached.

    The handler is installed on the ``babble`` root logger once, so module
    loggers created with logging.getLogger(__name__) share it.

    Args:
        name: Logger name (usually __name__)
        level: Level name; defaults to settings.LOG_LEVEL
    """
    root = logging.getLogger("babble")
    root.setLevel((level or settings.LOG_LEVEL).upper())

    if not any(getattr(h, "_babble", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._babble = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    return logging.getLogger(name)
