import pathlib
import sys
from typing import Callable

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


class _ManualTimer:
    def __init__(self, when: float, seq: int, callback: Callable[[], None]):
        self.when = when
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualClock:
    """Clock and scheduler whose time only moves when ``advance`` is called."""

    def __init__(self, start_ms: float = 0.0):
        self._now = start_ms
        self._seq = 0
        self._timers: list[_ManualTimer] = []

    def now_ms(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> _ManualTimer:
        self._seq += 1
        timer = _ManualTimer(self._now + max(0.0, delay_ms), self._seq, callback)
        self._timers.append(timer)
        return timer

    def advance(self, ms: float) -> None:
        """Move time forward, firing due callbacks in order."""
        target = self._now + ms
        while True:
            due = [t for t in self._timers if not t.cancelled and t.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.when, t.seq))
            self._timers.remove(timer)
            self._now = timer.when
            timer.callback()
        self._timers = [t for t in self._timers if not t.cancelled]
        self._now = target

    @property
    def pending(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled)


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()
