"""Expiring key-value cache for fetched articles.

Entries are stored as JSON ``CacheEntry`` documents under a common prefix, with
class-specific key namespaces (``featured_`` for date lookups, ``article_`` for
title lookups) so each class can carry its own TTL. Caching is an optimization:
storage failures are logged and treated as misses, never raised.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Protocol

from pydantic import ValidationError

from ..clock import Clock, SystemClock
from ..schemas.content import CacheEntry, ContentItem

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "magpie_cache_"


class CacheIOError(Exception):
    """A cache store could not read or write an entry."""


class CacheStore(Protocol):
    """Raw string storage behind ``ContentCache``."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryCacheStore:
    """Process-local store."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileCacheStore:
    """Store every entry in a single JSON object on disk."""

    def __init__(self, path: Path):
        self._path = path
        self._data: Optional[dict[str, str]] = None

    def _load(self) -> dict[str, str]:
        if self._data is not None:
            return self._data

        if not self._path.exists():
            self._data = {}
            return self._data

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise CacheIOError(f"Failed to read cache file {self._path}: {exc}") from exc
        except ValueError as exc:
            # Unparseable contents start over; the next write replaces the file
            logger.warning(f"Resetting unreadable cache file {self._path}: {exc}")
            data = {}

        if not isinstance(data, dict):
            logger.warning(f"Resetting cache file {self._path}: not a JSON object")
            data = {}
        self._data = {str(k): str(v) for k, v in data.items()}
        return self._data

    def _save(self) -> None:
        """Persist all entries atomically."""
        tmp_path = self._path.with_suffix(".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(self._data or {}), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as exc:
            raise CacheIOError(f"Failed to write cache file {self._path}: {exc}") from exc

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        self._load()[key] = value
        self._save()

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save()


def featured_key(year: int, month: int, day: int) -> str:
    """Cache key for a daily (date-based) lookup."""
    return f"featured_{year:04d}/{month:02d}/{day:02d}"


def article_key(title: str) -> str:
    """Cache key for a named lookup; names are case-folded."""
    return f"article_{title.casefold()}"


class ContentCache:
    """TTL cache of ``ContentItem`` payloads over a ``CacheStore``."""

    def __init__(
        self,
        store: Optional[CacheStore] = None,
        *,
        clock: Optional[Clock] = None,
        prefix: str = DEFAULT_PREFIX,
    ):
        self._store: CacheStore = store if store is not None else MemoryCacheStore()
        self._clock: Clock = clock or SystemClock()
        self._prefix = prefix

    def get(self, key: str) -> Optional[ContentItem]:
        """Return a live entry's payload; expired or unreadable entries are misses."""
        storage_key = self._prefix + key
        try:
            raw = self._store.get(storage_key)
        except CacheIOError as exc:
            logger.warning(f"Cache retrieval failed: {exc}")
            return None

        if raw is None:
            return None

        try:
            entry = CacheEntry.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning(f"Discarding corrupt cache entry {key}: {exc}")
            self._delete(storage_key)
            return None

        if not entry.is_valid(self._clock.now_ms()):
            logger.debug(f"Cache entry expired: {key}")
            self._delete(storage_key)
            return None

        return entry.payload

    def set(self, key: str, item: ContentItem, ttl_ms: int) -> None:
        """Store ``item`` until ``now + ttl_ms``."""
        entry = CacheEntry(
            key=key,
            payload=item.model_copy(update={"pending_completion": None}),
            expires_at=self._clock.now_ms() + ttl_ms,
        )
        try:
            self._store.set(self._prefix + key, entry.model_dump_json())
        except CacheIOError as exc:
            logger.warning(f"Cache storage failed: {exc}")

    def delete(self, key: str) -> None:
        self._delete(self._prefix + key)

    def _delete(self, storage_key: str) -> None:
        try:
            self._store.delete(storage_key)
        except CacheIOError as exc:
            logger.warning(f"Cache removal failed: {exc}")


__all__ = [
    "CacheIOError",
    "CacheStore",
    "ContentCache",
    "JsonFileCacheStore",
    "MemoryCacheStore",
    "article_key",
    "featured_key",
]
