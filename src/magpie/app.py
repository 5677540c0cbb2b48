"""Factory wiring the practice controller to its collaborators."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from .clock import AsyncioScheduler, Clock, Scheduler, SystemClock
from .config import Settings, get_settings
from .logging_config import configure_logging
from .services.acquisition import ContentAcquisitionService
from .services.content_cache import (
    CacheStore,
    ContentCache,
    JsonFileCacheStore,
    MemoryCacheStore,
)
from .services.practice import PracticeController, PracticeRenderer
from .services.segmentation import SyllableParser, build_hyphenator
from .services.wikipedia import WikipediaClient
from .utils.perf import PerformanceMonitor

logger = logging.getLogger(__name__)


def create_cache_store(settings: Settings) -> CacheStore:
    """Use the JSON file store when a cache path is configured."""
    if settings.cache_path is not None:
        logger.info(f"Using persistent article cache at {settings.cache_path}")
        return JsonFileCacheStore(settings.cache_path)
    return MemoryCacheStore()


def create_controller(
    settings: Optional[Settings] = None,
    *,
    renderer: Optional[PracticeRenderer] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    store: Optional[CacheStore] = None,
    clock: Optional[Clock] = None,
    scheduler: Optional[Scheduler] = None,
    setup_logging: bool = True,
) -> PracticeController:
    """Build a ``PracticeController`` from settings.

    With the default scheduler, pacing ticks run on the event loop that is
    running when playback starts. Pass ``setup_logging=False`` when the host
    application already configures logging.
    """
    settings = settings or get_settings()
    if setup_logging:
        configure_logging(settings)
    clock = clock or SystemClock()
    scheduler = scheduler or AsyncioScheduler()
    perf = PerformanceMonitor()

    cache = ContentCache(
        store if store is not None else create_cache_store(settings),
        clock=clock,
        prefix=settings.cache_prefix,
    )
    acquisition = ContentAcquisitionService(
        WikipediaClient(settings, http_client=http_client),
        cache,
        settings,
        perf=perf,
    )
    parser = SyllableParser(
        build_hyphenator(
            settings.hyphenation_language, settings.use_hyphenation_dictionary
        )
    )
    return PracticeController(
        acquisition,
        parser,
        settings,
        clock=clock,
        scheduler=scheduler,
        renderer=renderer,
        perf=perf,
    )


__all__ = ["create_cache_store", "create_controller"]
