"""Logging for ``mass_send``.

Modules log through ``get_logger("mass_send.<module>")`` and never install
handlers themselves. The CLI calls :func:`configure_logging` once; it puts a
single stream handler on the ``mass_send`` logger and, at DEBUG, on ``httpx``
as well so node requests are interleaved with the session's own messages.

``MASS_SEND_LOG_LEVEL`` picks the level when none is passed explicitly.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "mass_send"
_HTTP_LOGGER_NAME = "httpx"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: logging.Handler | None = None


def _parse_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv("MASS_SEND_LOG_LEVEL")
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = logging.getLevelName(name)
        if isinstance(numeric, int):
            return numeric
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
    force: bool = False,
) -> logging.Handler:
    """Attach the package handler and return it.

    Later calls are no-ops unless ``force`` is set, in which case the
    previous handler is replaced. ``stream`` defaults to the current
    ``sys.stderr``.
    """

    global _handler
    if _handler is not None and not force:
        return _handler

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    http_logger = logging.getLogger(_HTTP_LOGGER_NAME)
    for logger in (pkg_logger, http_logger):
        for old in list(logger.handlers):
            if old is _handler or isinstance(old, logging.NullHandler):
                logger.removeHandler(old)

    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(resolved)
    pkg_logger.propagate = False

    # httpx logs every request at INFO; only surface that when debugging.
    if resolved <= logging.DEBUG:
        http_logger.addHandler(handler)
        http_logger.setLevel(resolved)
        http_logger.propagate = False
    else:
        http_logger.propagate = True

    _handler = handler
    return handler


def get_logger(name: str) -> logging.Logger:
    """Logger for a ``mass_send`` module; silent until :func:`configure_logging` runs."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
