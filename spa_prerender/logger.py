# File: spa_prerender/logger.py
"""Logging setup for **spa_prerender**.

Every module logs through the ``SpaPrerender`` logger::

    from spa_prerender.logger import logger
    logger.info("Rendering %s", url)

Importing this module does not touch handlers. The CLI calls
:func:`init_logging` once; library users may call :func:`configure` or
attach their own handlers to ``logging.getLogger(LOGGER_NAME)``.

The orchestrator and the renderer take a logger at construction and fall
back to the project logger, so tests can inject their own.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

LOGGER_NAME: Final[str] = "SpaPrerender"
_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Rotation limits for --log-file
_MAX_BYTES: Final[int] = 2 * 1024 * 1024
_BACKUPS: Final[int] = 5

# handlers created here carry this attribute so that reconfiguring
# removes them without touching handlers installed by the host application
_OWNED_ATTR: Final[str] = "_spa_prerender_owned"

_LevelT = Union[int, str]


def _own(handler: logging.Handler, formatter: logging.Formatter) -> logging.Handler:
    handler.setFormatter(formatter)
    setattr(handler, _OWNED_ATTR, True)
    return handler


def _drop_owned_handlers(lg: logging.Logger) -> None:
    for handler in [h for h in lg.handlers if getattr(h, _OWNED_ATTR, False)]:
        lg.removeHandler(handler)
        handler.close()


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Attach console (and optionally rotating file) output to the project logger.

    Parameters
    ----------
    level
        ``"DEBUG"`` shows discovery decisions and browser launches, ``"INFO"``
        one line per rendered route.
    log_file
        Also write to this file, rotated at a few megabytes.
    log_format
        :class:`logging.Formatter` format string shared by both handlers.
    replace_handlers
        Remove handlers added by an earlier call first.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    if replace_handlers:
        _drop_owned_handlers(lg)

    formatter = logging.Formatter(log_format)
    lg.addHandler(_own(logging.StreamHandler(sys.stdout), formatter))
    if log_file is not None:
        file_handler = RotatingFileHandler(
            filename=str(log_file),
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUPS,
            encoding="utf-8",
        )
        lg.addHandler(_own(file_handler, formatter))

    # output would otherwise repeat through the root logger
    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """Entry point used by ``spa-prerender``; replaces earlier handlers."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


logger: logging.Logger = logging.getLogger(LOGGER_NAME)

__all__ = ["LOGGER_NAME", "logger", "configure", "init_logging"]
