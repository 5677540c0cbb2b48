"""Application configuration using environment variables."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root once so that `.env` is discovered regardless of CWD
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# Recognized pacing range (0.5-2.0 syllables/second); enforced by the UI only
MIN_SPEED_MS = 500
MAX_SPEED_MS = 2000


class Settings(BaseSettings):
    """Load configuration from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Pacing
    speed_ms: int = Field(
        default=1000,
        ge=1,
        validation_alias=AliasChoices("MAGPIE_SPEED_MS", "speed_ms"),
    )
    target_duration_ms: int = Field(
        default=10 * 60 * 1000,
        ge=1,
        validation_alias=AliasChoices(
            "MAGPIE_TARGET_DURATION_MS", "target_duration_ms"
        ),
    )

    # Progressive loading policy
    completeness_threshold_chars: int = Field(
        default=800,
        ge=0,
        validation_alias=AliasChoices(
            "MAGPIE_COMPLETENESS_THRESHOLD_CHARS",
            "completeness_threshold_chars",
        ),
    )
    merge_threshold_percent: float = Field(
        default=20.0,
        ge=0,
        validation_alias=AliasChoices(
            "MAGPIE_MERGE_THRESHOLD_PERCENT", "merge_threshold_percent"
        ),
    )
    prefetch_delay_ms: int = Field(
        default=2000,
        ge=0,
        validation_alias=AliasChoices("MAGPIE_PREFETCH_DELAY_MS", "prefetch_delay_ms"),
    )
    prefetch_next_day: bool = Field(
        default=True,
        validation_alias=AliasChoices("MAGPIE_PREFETCH_NEXT_DAY", "prefetch_next_day"),
    )

    # Cache
    daily_ttl_ms: int = Field(
        default=24 * 60 * 60 * 1000,
        ge=0,
        validation_alias=AliasChoices("MAGPIE_DAILY_TTL_MS", "daily_ttl_ms"),
    )
    named_ttl_ms: int = Field(
        default=7 * 24 * 60 * 60 * 1000,
        ge=0,
        validation_alias=AliasChoices("MAGPIE_NAMED_TTL_MS", "named_ttl_ms"),
    )
    cache_path: Optional[Path] = Field(
        default=None,
        validation_alias=AliasChoices("MAGPIE_CACHE_PATH", "cache_path"),
    )
    cache_prefix: str = Field(
        default="magpie_cache_",
        validation_alias=AliasChoices("MAGPIE_CACHE_PREFIX", "cache_prefix"),
    )

    # Retrieval
    retrieval_timeout_ms: int = Field(
        default=15_000,
        ge=1,
        validation_alias=AliasChoices(
            "MAGPIE_RETRIEVAL_TIMEOUT_MS", "retrieval_timeout_ms"
        ),
    )
    retrieval_retries: int = Field(
        default=2,
        ge=0,
        validation_alias=AliasChoices("MAGPIE_RETRIEVAL_RETRIES", "retrieval_retries"),
    )
    retrieval_backoff_base_ms: int = Field(
        default=1000,
        ge=0,
        validation_alias=AliasChoices(
            "MAGPIE_RETRIEVAL_BACKOFF_BASE_MS", "retrieval_backoff_base_ms"
        ),
    )
    featured_feed_url: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl(
            "https://api.wikimedia.org/feed/v1/wikipedia/en/featured"
        ),
        validation_alias=AliasChoices("MAGPIE_FEATURED_FEED_URL", "featured_feed_url"),
    )
    article_api_url: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl("https://en.wikipedia.org/w/api.php"),
        validation_alias=AliasChoices("MAGPIE_ARTICLE_API_URL", "article_api_url"),
    )
    article_page_url: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl("https://en.wikipedia.org/wiki/"),
        validation_alias=AliasChoices("MAGPIE_ARTICLE_PAGE_URL", "article_page_url"),
    )
    user_agent: str = Field(
        default="MagpiePacer/1.0 (fluency-shaping reading practice)",
        validation_alias=AliasChoices("MAGPIE_USER_AGENT", "user_agent"),
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("LOG_LEVEL", "log_level"),
    )
    log_file: Optional[Path] = Field(
        default=None,
        validation_alias=AliasChoices("LOG_FILE", "log_file"),
    )

    # Segmentation
    hyphenation_language: str = Field(
        default="en_US",
        validation_alias=AliasChoices(
            "MAGPIE_HYPHENATION_LANGUAGE", "hyphenation_language"
        ),
    )
    use_hyphenation_dictionary: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "MAGPIE_USE_HYPHENATION_DICTIONARY", "use_hyphenation_dictionary"
        ),
    )

    @property
    def retrieval_timeout_seconds(self) -> float:
        return self.retrieval_timeout_ms / 1000


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return Settings()  # pyright: ignore[reportCallIssue]


__all__ = ["MAX_SPEED_MS", "MIN_SPEED_MS", "Settings", "get_settings"]
