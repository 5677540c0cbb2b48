"""Timed syllable reveal with pause/resume-aware elapsed time."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional, Sequence

from ..clock import Clock, Scheduler, TimerHandle

logger = logging.getLogger(__name__)

SyllableCallback = Callable[[int, str], None]
CompleteCallback = Callable[[], None]

DEFAULT_SPEED_MS = 1000


class PlaybackState(str, Enum):
    """Possible states for a pacing session."""

    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    COMPLETED = "completed"


class PacingEngine:
    """
    Reveal a fixed syllable sequence one unit every ``speed_ms`` milliseconds.

    Ticks are fire-once timers that reschedule themselves, so at most one tick
    is outstanding. ``pause``/``stop``/``reset`` cancel it synchronously.
    Every operation is a no-op outside the states it applies to.
    """

    def __init__(
        self,
        syllables: Sequence[str],
        *,
        clock: Clock,
        scheduler: Scheduler,
        speed_ms: int = DEFAULT_SPEED_MS,
        on_syllable_change: Optional[SyllableCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
    ):
        self.syllables: tuple[str, ...] = tuple(syllables)
        self.speed_ms = speed_ms
        self.current_index = 0
        self.state = PlaybackState.IDLE
        self.start_time_ms = 0.0
        self.paused_elapsed_ms = 0.0
        self._clock = clock
        self._scheduler = scheduler
        self._on_syllable_change = on_syllable_change or (lambda index, syllable: None)
        self._on_complete = on_complete or (lambda: None)
        self._timer: TimerHandle | None = None

    @property
    def total(self) -> int:
        return len(self.syllables)

    @property
    def is_playing(self) -> bool:
        return self.state == PlaybackState.PLAYING

    @property
    def is_paused(self) -> bool:
        return self.state == PlaybackState.PAUSED

    def start(self) -> None:
        """Begin (or continue) revealing from ``current_index``."""
        if self.state == PlaybackState.PLAYING:
            return

        # A frozen elapsed value from an earlier run carries over
        self.start_time_ms = self._clock.now_ms() - self.paused_elapsed_ms
        self.state = PlaybackState.PLAYING
        self._tick()

    def pause(self) -> None:
        if self.state != PlaybackState.PLAYING:
            return

        self.paused_elapsed_ms = self._clock.now_ms() - self.start_time_ms
        self._cancel_timer()
        self.state = PlaybackState.PAUSED

    def resume(self) -> None:
        if self.state != PlaybackState.PAUSED:
            return

        # Shift the baseline so the paused gap is not counted
        self.start_time_ms = self._clock.now_ms() - self.paused_elapsed_ms
        self.state = PlaybackState.PLAYING
        self._tick()

    def reset(self) -> None:
        """Return to the beginning and preview the first syllable."""
        self._cancel_timer()
        self.current_index = 0
        self.paused_elapsed_ms = 0.0
        self.state = PlaybackState.IDLE
        self._on_syllable_change(0, self.syllables[0] if self.syllables else "")

    def stop(self) -> None:
        """Halt scheduling without moving the position.

        Elapsed time is frozen rather than cleared, so a later ``start()``
        continues the same timer. Use ``reset()`` to zero it.
        """
        if self.state == PlaybackState.PLAYING:
            self.paused_elapsed_ms = self._clock.now_ms() - self.start_time_ms
        self._cancel_timer()
        self.state = PlaybackState.IDLE

    def restore(self, index: int, elapsed_ms: float, *, paused: bool = False) -> int:
        """
        Transplant position and elapsed time from a replaced session.

        The index is clamped into the valid range for this sequence. With
        ``paused`` the engine enters PAUSED without scheduling anything.
        Returns the clamped index.
        """
        self._cancel_timer()
        self.current_index = max(0, min(index, self.total - 1))
        self.paused_elapsed_ms = elapsed_ms
        self.state = PlaybackState.PAUSED if paused else PlaybackState.IDLE
        return self.current_index

    def set_speed(self, speed_ms: int) -> None:
        """Change the interval; the next scheduled tick picks it up."""
        self.speed_ms = speed_ms

    def get_progress(self) -> dict[str, int]:
        total = self.total
        percentage = int(100 * self.current_index / total + 0.5) if total else 0
        return {"current": self.current_index, "total": total, "percentage": percentage}

    def get_elapsed_time(self) -> float:
        """Milliseconds of active playback, excluding paused gaps."""
        if self.state == PlaybackState.PLAYING:
            return self._clock.now_ms() - self.start_time_ms
        return self.paused_elapsed_ms

    def _tick(self) -> None:
        self._timer = None
        if self.state != PlaybackState.PLAYING:
            return

        if self.current_index >= self.total:
            self.paused_elapsed_ms = self._clock.now_ms() - self.start_time_ms
            self.state = PlaybackState.COMPLETED
            logger.debug(f"Pacing complete after {self.total} syllables")
            self._on_complete()
            return

        index = self.current_index
        self._on_syllable_change(index, self.syllables[index])
        self.current_index += 1

        # A callback may have paused or stopped the session
        if self.state == PlaybackState.PLAYING:
            self._timer = self._scheduler.call_later(self.speed_ms, self._tick)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


__all__ = ["DEFAULT_SPEED_MS", "PacingEngine", "PlaybackState"]
