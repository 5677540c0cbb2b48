"""Content payloads exchanged between acquisition, cache and practice."""

from __future__ import annotations

import asyncio
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PendingCompletion:
    """A background fetch that may yield a fuller version of an item.

    ``generation`` is the acquisition generation captured when the fetch was
    started; consumers compare it with the current one before applying the
    result. The task resolves to ``None`` when the fetch failed.
    """

    __slots__ = ("task", "generation")

    def __init__(self, task: "asyncio.Task[Optional[ContentItem]]", generation: int):
        self.task = task
        self.generation = generation

    def __repr__(self) -> str:
        return f"PendingCompletion(generation={self.generation}, done={self.task.done()})"


class ContentItem(BaseModel):
    """An article ready to be segmented."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    title: str
    text: str
    source_url: str
    pending_completion: Optional[PendingCompletion] = Field(default=None, exclude=True)

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


class ArticleSummary(BaseModel):
    """Daily summary record: title plus an inline (possibly short) extract."""

    title: str
    extract: str = ""
    source_url: str


class CacheEntry(BaseModel):
    """Persisted cache record; valid while ``now < expires_at`` (epoch ms)."""

    key: str
    payload: ContentItem
    expires_at: float

    def is_valid(self, now_ms: float) -> bool:
        return now_ms < self.expires_at


__all__ = ["ArticleSummary", "CacheEntry", "ContentItem", "PendingCompletion"]
