"""Practice controller tying acquisition, segmentation and pacing together.

The controller exclusively owns the live ``ParsedDocument`` and
``PacingEngine``. Loading new content or merging a late full-length article
stops the old engine before installing a new pair, so no tick from a replaced
session reaches the renderer.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, timedelta
from typing import Any, Optional, Protocol

from ..clock import Clock, Scheduler
from ..config import Settings
from ..schemas.content import ContentItem, PendingCompletion
from ..utils.perf import PerformanceMonitor
from ..utils.timefmt import TimeProgress, format_clock, time_progress
from .acquisition import ContentAcquisitionService
from .pacing import PacingEngine
from .segmentation import ParsedDocument, SyllableParser

logger = logging.getLogger(__name__)


class EmptyContentError(ValueError):
    """Content has no text (or no syllables) to pace through."""


class PracticeRenderer(Protocol):
    """Display surface fed by the controller."""

    def show_content(self, item: ContentItem, document: ParsedDocument) -> None: ...

    def highlight(self, index: int, syllable: str) -> None: ...

    def practice_complete(self) -> None: ...


class PracticeController:
    """Own the active article and its pacing session."""

    def __init__(
        self,
        acquisition: ContentAcquisitionService,
        parser: SyllableParser,
        settings: Settings,
        *,
        clock: Clock,
        scheduler: Scheduler,
        renderer: Optional[PracticeRenderer] = None,
        perf: Optional[PerformanceMonitor] = None,
    ):
        self._acquisition = acquisition
        self._parser = parser
        self._settings = settings
        self._clock = clock
        self._scheduler = scheduler
        self._renderer = renderer
        self._perf = perf or PerformanceMonitor()
        self.speed_ms = settings.speed_ms
        self.target_duration_ms = settings.target_duration_ms
        self.item: Optional[ContentItem] = None
        self.document: Optional[ParsedDocument] = None
        self.engine: Optional[PacingEngine] = None
        self._completion_tasks: set[asyncio.Task[Any]] = set()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load_daily(self, day: Optional[date] = None) -> ContentItem:
        """Load the featured article for ``day`` (today per the clock by default).

        Raises:
            RetrievalError: The lookup failed; current content is untouched.
            EmptyContentError: The article had nothing to display.
        """
        day = day or self.today()
        self._perf.start("Total: Load Featured Article")

        item = await self._acquisition.acquire_daily(day)
        logger.info(f"Featured article received: {item.title}")
        self.display(item)

        self._perf.end("Total: Load Featured Article")
        self._perf.report()

        if self._settings.prefetch_next_day:
            self._acquisition.schedule_prefetch(
                day + timedelta(days=1), self._settings.prefetch_delay_ms
            )

        if item.pending_completion is not None:
            task = asyncio.create_task(self._await_completion(item.pending_completion))
            self._completion_tasks.add(task)
            task.add_done_callback(self._completion_tasks.discard)

        return item

    def today(self) -> date:
        """Local calendar date according to the injected clock."""
        return date.fromtimestamp(self._clock.now_ms() / 1000)

    async def load_named(self, name: str) -> ContentItem:
        """Load an article by title or Wikipedia URL.

        Raises:
            ContentNotFound: No such article.
            RetrievalError: The lookup failed; current content is untouched.
            EmptyContentError: The article had nothing to display.
        """
        item = await self._acquisition.acquire_named(name)
        logger.info(f"Article received: {item.title}")
        self.display(item)
        return item

    def display(self, item: ContentItem) -> ParsedDocument:
        """Segment ``item`` and start a fresh idle session over it."""
        if item.is_blank:
            raise EmptyContentError("Article appears to be empty")

        self._perf.start("Syllable Parsing")
        document = self._parser.parse(item.text)
        self._perf.end("Syllable Parsing")

        if document.is_empty:
            raise EmptyContentError("Could not parse syllables from article")

        self._install(item, document)
        return document

    def _install(self, item: ContentItem, document: ParsedDocument) -> PacingEngine:
        if self.engine is not None:
            self.engine.stop()

        engine = PacingEngine(
            document.syllables,
            clock=self._clock,
            scheduler=self._scheduler,
            speed_ms=self.speed_ms,
            on_syllable_change=self._on_syllable_change,
            on_complete=self._on_complete,
        )
        self.item = item
        self.document = document
        self.engine = engine

        if self._renderer is not None:
            self._renderer.show_content(item, document)
        return engine

    # ------------------------------------------------------------------
    # Progressive completion
    # ------------------------------------------------------------------

    @property
    def pending_updates(self) -> tuple[asyncio.Task[Any], ...]:
        """Background tasks waiting to merge a fuller article."""
        return tuple(self._completion_tasks)

    async def _await_completion(self, pending: PendingCompletion) -> None:
        try:
            full_article = await pending.task
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning(f"Progressive article update failed: {exc}")
            return

        if full_article is None:
            return
        if not self._acquisition.is_current(pending.generation):
            logger.debug(f"Discarding stale completion for '{full_article.title}'")
            return

        self.apply_completion(full_article)

    def apply_completion(self, item: ContentItem) -> bool:
        """Swap in a fuller version of the current article.

        The swap only happens when the new text has at least
        ``merge_threshold_percent`` more syllables. Position, elapsed time and
        play/pause state carry over; the position is clamped to the new range.
        Returns True when the content was replaced.
        """
        if item.is_blank:
            return False

        document = self._parser.parse(item.text)
        if document.is_empty:
            return False

        current_count = self.engine.total if self.engine is not None else 0
        new_count = len(document.syllables)
        if current_count > 0:
            increase = (new_count - current_count) / current_count * 100
            if increase < self._settings.merge_threshold_percent:
                logger.info(
                    f"Skipping progressive update: only {increase:.1f}% more content"
                )
                return False

        old = self.engine
        was_playing = old is not None and old.is_playing
        was_paused = old is not None and old.is_paused
        index = old.current_index if old is not None else 0
        elapsed_ms = old.get_elapsed_time() if old is not None else 0.0

        engine = self._install(item, document)
        position = engine.restore(index, elapsed_ms, paused=was_paused)

        if was_playing:
            engine.start()
        elif was_paused:
            self._on_syllable_change(position, engine.syllables[position])

        logger.info(
            f"Updated '{item.title}' from {current_count} to {new_count} syllables"
        )
        return True

    # ------------------------------------------------------------------
    # Control surface
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self.engine is not None:
            self.engine.start()

    def pause(self) -> None:
        if self.engine is not None:
            self.engine.pause()

    def resume(self) -> None:
        if self.engine is not None:
            self.engine.resume()

    def toggle_pause(self) -> None:
        if self.engine is None:
            return
        if self.engine.is_paused:
            self.engine.resume()
        else:
            self.engine.pause()

    def reset(self) -> None:
        if self.engine is not None:
            self.engine.reset()

    def stop(self) -> None:
        if self.engine is not None:
            self.engine.stop()

    def set_speed(self, speed_ms: int) -> None:
        self.speed_ms = speed_ms
        if self.engine is not None:
            self.engine.set_speed(speed_ms)

    def set_target_duration(self, minutes: int) -> None:
        self.target_duration_ms = minutes * 60000

    def progress(self) -> dict[str, int]:
        if self.engine is None:
            return {"current": 0, "total": 0, "percentage": 0}
        return self.engine.get_progress()

    def elapsed_ms(self) -> float:
        return self.engine.get_elapsed_time() if self.engine is not None else 0.0

    def timer_text(self) -> str:
        return format_clock(self.elapsed_ms())

    def time_progress(self) -> TimeProgress:
        return time_progress(self.elapsed_ms(), self.target_duration_ms)

    async def aclose(self) -> None:
        self.stop()
        for task in list(self._completion_tasks):
            task.cancel()
        await self._acquisition.aclose()

    # ------------------------------------------------------------------
    # Engine notifications
    # ------------------------------------------------------------------

    def _on_syllable_change(self, index: int, syllable: str) -> None:
        if self._renderer is not None:
            self._renderer.highlight(index, syllable)

    def _on_complete(self) -> None:
        logger.info("Practice complete")
        if self._renderer is not None:
            self._renderer.practice_complete()


__all__ = ["EmptyContentError", "PracticeController", "PracticeRenderer"]
