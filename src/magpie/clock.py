"""Injectable time sources for pacing and cache expiry.

Playback and cache code never read the system clock or create timers
directly; they receive a ``Clock`` and a ``Scheduler`` so tests can drive
simulated time deterministically.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Clock(Protocol):
    """Source of the current time in milliseconds."""

    def now_ms(self) -> float: ...


class Scheduler(Protocol):
    """Fire-once timer capability."""

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle: ...


class SystemClock:
    """Wall-clock time in epoch milliseconds."""

    def now_ms(self) -> float:
        return time.time() * 1000


class AsyncioScheduler:
    """Schedule callbacks on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(0.0, delay_ms) / 1000, callback)


__all__ = ["AsyncioScheduler", "Clock", "Scheduler", "SystemClock", "TimerHandle"]
