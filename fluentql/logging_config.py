"""Centralized logging configuration for fluentQL.

The library itself only creates module loggers under the ``fluentql``
namespace and attaches a ``NullHandler``; applications that want console
output call :func:`setup_logging`.  The query builder never logs; the
database layer logs executed statements, failures and rollbacks.

Environment variables:

* ``FLUENTQL_LOG_LEVEL``: level name, default ``WARNING``.
* ``FLUENTQL_LOG_FILE``: optional path for a rotating log file.
"""

import logging
import logging.config
import os
import sys
from typing import Any, Dict, Optional


def get_log_level() -> str:
    """Get log level from environment variable or default to WARNING."""
    return os.getenv("FLUENTQL_LOG_LEVEL", "WARNING").upper()


def get_logging_config(level: Optional[str] = None) -> Dict[str, Any]:
    """Get the logging configuration dictionary."""
    log_level = (level or get_log_level()).upper()

    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s | %(name)-20s | %(levelname)-8s | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": "%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": "standard",
                "stream": sys.stderr,
            },
        },
        "loggers": {
            "fluentql": {
                "level": log_level,
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }

    log_file = os.getenv("FLUENTQL_LOG_FILE")
    if log_file:
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": log_level,
            "formatter": "detailed",
            "filename": log_file,
            "maxBytes": 10 * 1024 * 1024,  # 10MB
            "backupCount": 5,
        }
        config["loggers"]["fluentql"]["handlers"].append("file")

    return config


def setup_logging(level: Optional[str] = None) -> None:
    """Configure console (and optional file) logging for fluentQL loggers."""
    logging.config.dictConfig(get_logging_config(level))
    logger = logging.getLogger("fluentql.logging")
    logger.debug("Logging configured with level: %s", (level or get_log_level()).upper())


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger inside the ``fluentql`` hierarchy.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Logger instance
    """
    if not name.startswith("fluentql"):
        name = f"fluentql.{name}"
    return logging.getLogger(name)
