"""Services for acquiring, segmenting and pacing article text."""

from .acquisition import ContentAcquisitionService
from .content_cache import (
    CacheIOError,
    CacheStore,
    ContentCache,
    JsonFileCacheStore,
    MemoryCacheStore,
)
from .pacing import PacingEngine, PlaybackState
from .practice import EmptyContentError, PracticeController, PracticeRenderer
from .wikipedia import (
    ContentNotFound,
    RetrievalError,
    RetrievalTimeout,
    RetrievalTransportError,
    WikipediaClient,
)

__all__ = [
    "CacheIOError",
    "CacheStore",
    "ContentAcquisitionService",
    "ContentCache",
    "ContentNotFound",
    "EmptyContentError",
    "JsonFileCacheStore",
    "MemoryCacheStore",
    "PacingEngine",
    "PlaybackState",
    "PracticeController",
    "PracticeRenderer",
    "RetrievalError",
    "RetrievalTimeout",
    "RetrievalTransportError",
    "WikipediaClient",
]
