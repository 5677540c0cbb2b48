"""Syllable-paced reading practice for fluency shaping."""

from .app import create_controller
from .config import Settings, get_settings
from .logging_config import configure_logging

__all__ = ["Settings", "configure_logging", "create_controller", "get_settings"]
