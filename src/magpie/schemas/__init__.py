"""Pydantic models for content and cache payloads."""

from .content import ArticleSummary, CacheEntry, ContentItem, PendingCompletion

__all__ = ["ArticleSummary", "CacheEntry", "ContentItem", "PendingCompletion"]
