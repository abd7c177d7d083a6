"""Logging utilities for Quantum Shift.

Every module that logs asks for its logger through :func:`get_logger` so that
all output shares one handler setup and one level switch.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

_DEFAULT_LEVEL = logging.WARNING
_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
_ROOT_NAME = "qshift"

_stream: Optional[TextIO] = None
_format: str = _DEFAULT_FORMAT

_loggers: dict[str, logging.Logger] = {}


def _coerce_level(level: int | str) -> int:
    """Turn a level name such as ``"debug"`` into its numeric value."""
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return int(level)


def _make_handler(level: int, stream: TextIO, format_string: str) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_string))
    return handler


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get or create the logger for a module.

    Args:
        name: Usually ``__name__`` of the caller. Names outside the
            ``qshift`` namespace are prefixed with ``qshift.``. If None, the
            package root logger is returned.

    Returns:
        A cached :class:`logging.Logger` writing to stderr.

    Example:
        >>> from qshift.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("marked %d nodes", 3)
    """
    if name is None:
        logger_name = _ROOT_NAME
    elif name == _ROOT_NAME or name.startswith(_ROOT_NAME + "."):
        logger_name = name
    else:
        logger_name = f"{_ROOT_NAME}.{name}"

    cached = _loggers.get(logger_name)
    if cached is not None:
        return cached

    logger = logging.getLogger(logger_name)
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        logger.addHandler(_make_handler(_DEFAULT_LEVEL, _stream or sys.stderr, _format))
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the level of every Quantum Shift logger, present and future.

    Args:
        level: Numeric level or a name such as ``"DEBUG"``.
    """
    global _DEFAULT_LEVEL
    level = _coerce_level(level)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    _DEFAULT_LEVEL = level


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Reconfigure level, format and output stream of all loggers.

    Existing handlers are replaced, so this is meant to be called once at
    application start-up (or by tests that capture output).

    Args:
        level: Logging level (default WARNING).
        format_string: Custom format; defaults to ``[LEVEL] name: message``.
        stream: Output stream; defaults to ``sys.stderr``.
    """
    global _DEFAULT_LEVEL, _stream, _format
    level = _coerce_level(level)
    stream = sys.stderr if stream is None else stream
    format_string = _DEFAULT_FORMAT if format_string is None else format_string

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.addHandler(_make_handler(level, stream, format_string))

    _DEFAULT_LEVEL = level
    _stream = stream
    _format = format_string
