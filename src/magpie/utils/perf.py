"""Lightweight timing marks for fetch, parse and load steps."""

from __future__ import annotations

import logging
import time
from typing import Optional

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """Record labelled durations in milliseconds."""

    def __init__(self) -> None:
        self.timings: dict[str, float] = {}
        self._marks: dict[str, float] = {}

    def start(self, label: str) -> None:
        self._marks[label] = time.perf_counter()
        logger.debug(f"[START] {label}")

    def end(self, label: str) -> Optional[float]:
        """Close a mark; returns its duration, or None if it was never started."""
        started = self._marks.pop(label, None)
        if started is None:
            return None

        duration = (time.perf_counter() - started) * 1000
        self.timings[label] = duration
        logger.debug(f"[END] {label}: {duration:.2f}ms")
        return duration

    def report(self) -> dict[str, float]:
        total = sum(self.timings.values())
        for label, duration in self.timings.items():
            logger.debug(f"{label}: {duration:.2f}ms")
        logger.debug(f"Total time to content: {total:.2f}ms ({total / 1000:.2f}s)")
        return dict(self.timings)


__all__ = ["PerformanceMonitor"]
