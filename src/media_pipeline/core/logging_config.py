"""Centralized logging configuration for the media pipeline."""

import os
import sys
import logging
from typing import Optional

ROOT_LOGGER_NAME = "media-pipeline"

_FORMATS = {
    "structured": (
        "%(asctime)s | %(name)s | %(levelname)-8s | "
        "%(threadName)s | %(funcName)s() | %(message)s"
    ),
    "simple": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Configure a logger with a stdout handler.

    Args:
        name: Logger name (defaults to "media-pipeline")
        level: Log level override (defaults to env var or INFO)
        format_type: Logging format ("structured" or "simple")

    Returns:
        Configured logger instance

    Environment Variables:
        LOG_LEVEL: Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_FORMAT: Set format type ("structured" or "simple")
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    # Avoid duplicate handlers
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        env_format = os.getenv("LOG_FORMAT", format_type).lower()
        handler.setFormatter(
            logging.Formatter(
                _FORMATS.get(env_format, _FORMATS["simple"]),
                datefmt="%Y-%m-%d %H:%M:%S" if env_format == "structured" else None,
            )
        )
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger instance with consistent configuration.

    Names under ``media-pipeline.`` are component loggers: they keep no handler
    or level of their own and propagate to the pipeline logger, which is set up
    on first use. Setting the pipeline logger's level (``set_debug``) therefore
    applies to every component. Any other name is configured standalone.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    if name.startswith(ROOT_LOGGER_NAME + "."):
        if not logging.getLogger(ROOT_LOGGER_NAME).handlers:
            setup_logger(ROOT_LOGGER_NAME)
        return logging.getLogger(name)
    return setup_logger(name)


def set_debug(logger: logging.Logger) -> None:
    """Switch a logger and the root logger to DEBUG."""
    logger.setLevel(logging.DEBUG)
    logging.getLogger().setLevel(logging.DEBUG)
