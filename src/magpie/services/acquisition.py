"""Content acquisition with caching and progressive completion.

Daily lookups return the featured-article summary right away. When its
extract is short, the abbreviated item carries a ``PendingCompletion`` whose
task fetches the full article in the background and caches it under the same
daily key.

Every foreground request advances a generation counter. A pending completion
records the generation of the request that created it, so a consumer can tell
whether a newer request has superseded it before applying the result. Cache
writes from a superseded completion still happen.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Coroutine, Optional

from ..config import Settings
from ..schemas.content import ContentItem, PendingCompletion
from ..utils.perf import PerformanceMonitor
from .content_cache import ContentCache, article_key, featured_key
from .wikipedia import RetrievalError, WikipediaClient, title_from_input

logger = logging.getLogger(__name__)


class ContentAcquisitionService:
    """Serve daily and named articles from cache or the text source."""

    def __init__(
        self,
        client: WikipediaClient,
        cache: ContentCache,
        settings: Settings,
        perf: Optional[PerformanceMonitor] = None,
    ):
        self._client = client
        self._cache = cache
        self._settings = settings
        self._perf = perf or PerformanceMonitor()
        self._generation = 0
        self._background_tasks: set[asyncio.Task[Any]] = set()

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, generation: int) -> bool:
        """True while no newer foreground request has started."""
        return generation == self._generation

    def _advance_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    async def acquire_daily(self, day: date, *, foreground: bool = True) -> ContentItem:
        """Return the featured article for ``day``.

        The result may be abbreviated; in that case ``pending_completion`` is
        set and resolves to the full article (or ``None`` on failure).

        Raises:
            RetrievalError: The summary lookup failed.
        """
        token = self._advance_generation() if foreground else self._generation
        key = featured_key(day.year, day.month, day.day)

        cached = self._cache.get(key)
        if cached is not None:
            logger.info(f"Using cached featured article for {day.isoformat()}")
            return cached

        self._perf.start("API: Featured Article Fetch")
        summary = await self._client.get_featured_summary(day.year, day.month, day.day)
        self._perf.end("API: Featured Article Fetch")

        item = ContentItem(
            title=summary.title,
            text=summary.extract,
            source_url=summary.source_url,
        )

        if len(summary.extract) > self._settings.completeness_threshold_chars:
            self._cache.set(key, item, self._settings.daily_ttl_ms)
            return item

        logger.info(
            f"Extract for '{summary.title}' is short ({len(summary.extract)} chars), "
            "fetching full article in background"
        )
        task = self._spawn(self._complete_daily(key, summary.title))
        return item.model_copy(
            update={"pending_completion": PendingCompletion(task, token)}
        )

    async def _complete_daily(self, key: str, title: str) -> Optional[ContentItem]:
        try:
            full_article = await self._fetch_article(title)
        except RetrievalError as exc:
            logger.warning(f"Failed to fetch full article, keeping extract: {exc}")
            return None

        self._cache.set(key, full_article, self._settings.daily_ttl_ms)
        return full_article

    async def acquire_named(self, name: str) -> ContentItem:
        """Return the complete article for a title or Wikipedia URL.

        Raises:
            ContentNotFound: No article has that title.
            RetrievalError: The lookup failed.
        """
        self._advance_generation()
        return await self._fetch_article(title_from_input(name))

    async def _fetch_article(self, title: str) -> ContentItem:
        key = article_key(title)
        cached = self._cache.get(key)
        if cached is not None:
            logger.info(f"Using cached article: {title}")
            return cached

        self._perf.start("API: Full Article Fetch")
        article = await self._client.get_article(title)
        self._perf.end("API: Full Article Fetch")

        self._cache.set(key, article, self._settings.named_ttl_ms)
        return article

    async def prefetch_daily(self, day: date) -> Optional[ContentItem]:
        """Warm the cache for ``day`` without superseding the current request."""
        try:
            item = await self.acquire_daily(day, foreground=False)
        except RetrievalError as exc:
            logger.info(f"Could not prefetch featured article for {day}: {exc}")
            return None

        logger.info(f"Prefetched featured article for {day.isoformat()}")
        return item

    def schedule_prefetch(self, day: date, delay_ms: int) -> asyncio.Task[Any]:
        """Run ``prefetch_daily`` in the background after ``delay_ms``."""

        async def _delayed() -> Optional[ContentItem]:
            await asyncio.sleep(delay_ms / 1000)
            return await self.prefetch_daily(day)

        return self._spawn(_delayed())

    async def aclose(self) -> None:
        """Cancel background work and release the HTTP client."""
        tasks = list(self._background_tasks)
        for task in tasks:
            if not task.done():
                task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._background_tasks.clear()
        await self._client.aclose()


__all__ = ["ContentAcquisitionService"]
