"""Logging utilities for registrygen commands."""

from __future__ import annotations

import logging

_LOGGER_NAME = "registrygen"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the registrygen hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(verbosity: int = 0) -> logging.Logger:
    """Configure the registrygen logger for console output.

    Warnings are always shown. One ``-v`` adds INFO, two or more add DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI is invoked repeatedly.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[registrygen] %(levelname)s %(message)s"))
    logger.addHandler(handler)

    return logger


__all__ = ["configure_logging", "get_logger"]
