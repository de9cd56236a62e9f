"""
Centralized logging configuration.

Usage:
    from ideavault.config import setup_logging
    setup_logging()   # Call once at startup (in main.py or the web app)
"""

import logging
import sys

from ideavault.config import config


# Third-party loggers that are noisy at INFO
_QUIET_LOGGERS = [
    "urllib3",
    "werkzeug",
]


def _parse_level(raw: str) -> int:
    """Turn a level name into a logging constant, defaulting to INFO."""
    level = logging.getLevelName(str(raw).upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(level: str = None) -> None:
    """
    Configure the root logger.
    
    Args:
        level: Level name overriding LOG_LEVEL from the environment.
    """
    root_level = _parse_level(level or config.LOG_LEVEL)
    
    root = logging.getLogger()
    root.setLevel(root_level)
    
    # Flask's dev server and pytest may already have installed a handler
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
        )
        root.addHandler(handler)
    
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(root_level, logging.WARNING))
    
    logging.getLogger(__name__).debug(
        "Logging configured (root=%s)", logging.getLevelName(root_level)
    )
