"""Logging initialization."""

from __future__ import annotations

import logging

from . import config


def configure_logging(level: str | None = None, format: str | None = None) -> logging.Logger:
    """Attach a stream handler to the ``protolink`` logger.

    Calling this more than once adjusts the level but never stacks handlers.
    """

    logger = logging.getLogger('protolink')
    logger.setLevel(level or config.log_level)

    if not any(getattr(handler, '_protolink', False) for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(format or config.log_format))
        handler._protolink = True
        logger.addHandler(handler)

    return logger


__all__ = ["configure_logging"]
