"""Formatting for the practice timer and target-duration progress."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TimeProgress:
    percentage: float  # capped at 100
    text: str  # e.g. "1:05 / 10:00 (10%)"


def _split(ms: float) -> tuple[int, int]:
    total = max(0, int(ms))
    return total // 60000, (total % 60000) // 1000


def format_clock(ms: float) -> str:
    """Format elapsed milliseconds as zero-padded ``MM:SS``."""
    minutes, seconds = _split(ms)
    return f"{minutes:02d}:{seconds:02d}"


def format_short(ms: float) -> str:
    """Format milliseconds as ``M:SS``."""
    minutes, seconds = _split(ms)
    return f"{minutes}:{seconds:02d}"


def time_progress(elapsed_ms: float, target_ms: float) -> TimeProgress:
    """Elapsed practice time against a target session length."""
    percentage = min(100.0, elapsed_ms / target_ms * 100) if target_ms > 0 else 100.0
    return TimeProgress(
        percentage=percentage,
        text=f"{format_short(elapsed_ms)} / {format_short(target_ms)} ({int(percentage)}%)",
    )


__all__ = ["TimeProgress", "format_clock", "format_short", "time_progress"]
