"""Logging for the ``statement_import`` package.

Library modules only call ``get_logger("statement_import.<module>")``. Until an
entrypoint calls :func:`configure_logging`, the package logger carries a
``NullHandler`` so importing the pipeline into a host application prints
nothing. The CLI configures it once per process; the level comes from the
argument, then ``STATEMENT_IMPORT_LOG_LEVEL``, then ``INFO``.

The pipeline logs one summary line per stage at ``INFO`` (rows read, rows
imported) and one line per skipped or held-out row at ``DEBUG``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "statement_import"
LEVEL_ENV_VAR = "STATEMENT_IMPORT_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_HANDLER_NAME = "statement_import.console"


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv(LEVEL_ENV_VAR) or logging.INFO
    if isinstance(level, int):
        return level
    return logging.getLevelNamesMapping().get(level.strip().upper(), logging.INFO)


def configure_logging(
    level: int | str | None = None,
    *,
    stream: IO[str] = sys.stderr,
) -> logging.Logger:
    """Attach the console handler to the package logger and return the logger.

    Calling it again is a no-op: the handler is found by name and left as is.
    Unknown level names fall back to ``INFO``.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    if any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        return logger

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _resolve_level(level)
    handler = logging.StreamHandler(stream)
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(resolved)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
