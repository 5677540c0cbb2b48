"""Process-wide logging setup driven by ``Settings``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .config import Settings, get_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that only speak up at DEBUG
_CHATTY_LOGGERS = ("httpx", "httpcore")


def resolve_level(name: str) -> int:
    """Map a level name such as ``"debug"`` to its ``logging`` constant."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(settings: Optional[Settings] = None) -> int:
    """Install console (and optional file) handlers for the ``magpie`` loggers.

    Returns the effective level so callers can log it.
    """
    settings = settings or get_settings()

    level = resolve_level(settings.log_level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if settings.log_file is not None:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.getLogger("magpie").setLevel(level)

    quiet_level = level if level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    return level


__all__ = ["DATE_FORMAT", "LOG_FORMAT", "configure_logging", "resolve_level"]
