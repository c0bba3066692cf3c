"""Logging configuration for the Overleaf launcher.

Console logging goes to stderr so that progress output on stdout stays
readable when both are shown in the same terminal.
"""

from __future__ import annotations

import logging
import logging.config
import sys
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from overleaf_launcher.startup.config_schema import LauncherConfig

logger = logging.getLogger(__name__)


def build_logging_config(level: str = "INFO", *, debug: bool = False) -> dict[str, Any]:
    """Return a ``dictConfig`` mapping for the given level."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": (
                    "%(asctime)s | %(name)s | %(levelname)s | "
                    "%(filename)s:%(lineno)d | %(funcName)s | %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "simple": {
                "format": "%(asctime)s | %(levelname)s | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "detailed" if debug else "simple",
                "stream": sys.stderr,
            },
        },
        "loggers": {
            "overleaf_launcher": {
                "level": level,
                "handlers": ["console"],
                "propagate": False,
            },
            "httpx": {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
        "root": {
            "level": "WARNING",
            "handlers": ["console"],
        },
    }


def setup_logging(config: LauncherConfig | None = None) -> None:
    """Configure logging from launcher settings."""
    level = config.log_level.value if config else "INFO"
    debug = config.debug if config else False

    logging.config.dictConfig(build_logging_config(level, debug=debug))

    logger.debug("Logging configured with level %s", level)
