"""Utility helpers for pacing services."""

from .perf import PerformanceMonitor
from .timefmt import TimeProgress, format_clock, time_progress

__all__ = ["PerformanceMonitor", "TimeProgress", "format_clock", "time_progress"]
