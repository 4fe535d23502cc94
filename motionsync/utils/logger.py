"""Logging setup shared by the engine and its collaborator adapters."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_LOGGING_CONFIGURED = False


def _resolve_level(level: int | str | None) -> int:
    """Resolves an explicit level, then LOG_LEVEL, then INFO."""
    candidate: int | str | None = level
    if candidate is None:
        candidate = os.getenv("LOG_LEVEL") or logging.INFO
    if isinstance(candidate, int):
        return candidate
    resolved = logging.getLevelName(str(candidate).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: int | str | None = None) -> int:
    """Configures root logging once and returns the applied level.

    Arguments:
        level (int | str | None): Explicit level; overrides ``LOG_LEVEL``.

    Returns:
        int: The numeric level applied to the root logger.
    """
    global _LOGGING_CONFIGURED
    resolved = _resolve_level(level)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(format=LOG_FORMAT, level=resolved)
        for handler in root_logger.handlers:
            handler.setLevel(resolved)
    root_logger.setLevel(resolved)
    _LOGGING_CONFIGURED = True
    return resolved


def get_logger(name: str) -> logging.Logger:
    """Returns a module logger, configuring logging on first use."""
    if not _LOGGING_CONFIGURED:
        configure_logging()
    return logging.getLogger(name)
