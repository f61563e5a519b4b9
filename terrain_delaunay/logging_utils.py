"""Logging utilities for terrain_delaunay.

All package loggers live under the 'terrain_delaunay' namespace. The package
only attaches a NullHandler on import; call configure_logging() to get output.
The process root logger is never modified.
"""
from __future__ import annotations

import logging
import sys

ROOT_LOGGER_NAME = 'terrain_delaunay'

_FORMAT = logging.Formatter('%(levelname)s %(name)s: %(message)s')


def _ensure_package_root() -> logging.Logger:
    """Give the package logger a single stdout handler, isolated from the root logger."""
    package_root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(package_root.handlers):
        if isinstance(handler, logging.NullHandler):
            package_root.removeHandler(handler)
    if not package_root.handlers:
        handler = logging.StreamHandler(stream=sys.stdout)
        handler.setFormatter(_FORMAT)
        package_root.addHandler(handler)
    package_root.propagate = False
    return package_root


def _to_level(level: str | int | None, default: int = logging.INFO) -> int:
    if level is None:
        return default
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if isinstance(resolved, int):
        return resolved
    return default


def configure_logging(level: str | int = 'INFO', mute_external: bool = True) -> logging.Logger:
    """Set the level of the package logger family and attach a stdout handler.

    With ``mute_external`` and a DEBUG level, matplotlib's font manager chatter
    is held at INFO.
    """
    package_root = _ensure_package_root()
    lvl = _to_level(level)
    package_root.setLevel(lvl)
    if mute_external and lvl <= logging.DEBUG:
        for noisy in ('matplotlib', 'matplotlib.font_manager'):
            logging.getLogger(noisy).setLevel(logging.INFO)
    return package_root


def get_logger(name: str, level: str | int | None = None) -> logging.Logger:
    """Return a logger under the package namespace.

    Names outside the namespace (e.g. '__main__') are nested under it. Without
    an explicit level the logger inherits from the package logger.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + '.'):
        name = f'{ROOT_LOGGER_NAME}.{name}'
    log = logging.getLogger(name)
    log.setLevel(_to_level(level) if level is not None else logging.NOTSET)
    return log


__all__ = ['get_logger', 'configure_logging', 'ROOT_LOGGER_NAME']
