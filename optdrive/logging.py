"""Logging helpers for optdrive.

Every optdrive logger is a child of the ``optdrive`` package logger, which
owns the only handler. Configuring that logger configures the whole package.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

PACKAGE = "optdrive"

_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def _coerce_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


def _package_logger() -> logging.Logger:
    logger = logging.getLogger(PACKAGE)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.WARNING)
        logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the logger for ``name`` inside the ``optdrive`` namespace.

    Names outside the namespace are prefixed with ``optdrive.``; ``None``
    returns the package logger itself.

    Example:
        >>> from optdrive.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("Starting run")
    """
    package = _package_logger()
    if name is None or name == PACKAGE:
        return package
    if not name.startswith(PACKAGE + "."):
        name = f"{PACKAGE}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Replace the package handler and set the package level.

    Args:
        level: Logging level or its name, e.g. ``"DEBUG"`` (default: WARNING).
        format_string: Custom format string. If None, uses default.
        stream: Output stream (default: sys.stderr).
    """
    logger = _package_logger()
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(format_string or _DEFAULT_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(_coerce_level(level))


__all__ = ["get_logger", "configure_logging"]
