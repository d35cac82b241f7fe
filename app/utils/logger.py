"""
Logging helpers.

Every module grabs its logger with ``get_logger(__name__)``; the app
factory calls ``setup_logging(config)`` once at startup.
"""

import logging
import sys
from typing import Optional

from app.config import Config

_configured = False


def setup_logging(config: Optional[Config] = None) -> None:
    """Configure the root logger from LOG_LEVEL / LOG_FORMAT."""
    global _configured
    if _configured:
        return

    level_name = (config.LOG_LEVEL if config else "INFO").upper()
    fmt = config.LOG_FORMAT if config else "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
