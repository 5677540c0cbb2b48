"""Wikipedia retrieval client.

Two lookups back the acquisition layer:

- Featured article summary for a date (Wikimedia feed, ``tfa`` record). The
  inline extract is often only the lead paragraph.
- Full plain-text article by title (MediaWiki ``prop=extracts``).

API Docs:
- https://api.wikimedia.org/wiki/Feed_API/Reference/Featured_content
- https://www.mediawiki.org/wiki/Extension:TextExtracts#API
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Mapping, Optional
from urllib.parse import quote, unquote

import httpx

from ..config import Settings
from ..schemas.content import ArticleSummary, ContentItem

logger = logging.getLogger(__name__)

_WIKIPEDIA_URL_PATTERN = re.compile(
    r"(?:https?://)?(?:\w+\.)?wikipedia\.org/wiki/([^#?]+)", re.IGNORECASE
)


class RetrievalError(Exception):
    """Base class for failures talking to the text source."""


class RetrievalTimeout(RetrievalError):
    """Every attempt timed out."""

    def __init__(self, url: str, timeout_ms: int, attempts: int):
        super().__init__(
            f"Request timed out after {timeout_ms}ms ({attempts} attempts): {url}"
        )
        self.url = url
        self.timeout_ms = timeout_ms
        self.attempts = attempts


class RetrievalTransportError(RetrievalError):
    """The last attempt failed with a bad status or a network error."""

    def __init__(self, url: str, detail: Any, status_code: Optional[int] = None):
        prefix = f"HTTP {status_code}: " if status_code is not None else ""
        super().__init__(f"{prefix}{detail}")
        self.url = url
        self.detail = detail
        self.status_code = status_code


class ContentNotFound(RetrievalError):
    """A lookup resolved to no matching content."""

    def __init__(self, name: str):
        super().__init__(f'Article "{name}" not found')
        self.name = name


def title_from_input(value: str) -> str:
    """Return an article title from a bare title or a Wikipedia page URL."""
    title = value.strip()
    match = _WIKIPEDIA_URL_PATTERN.search(title)
    if match:
        title = unquote(match.group(1))
        logger.debug(f"Extracted title from URL: {title}")
    return title


class WikipediaClient:
    """Fetch article text with timeouts, bounded retries and backoff."""

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._settings = settings
        self._client = http_client
        self._owns_client = http_client is None

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._settings.retrieval_timeout_seconds),
                follow_redirects=True,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Api-User-Agent": self._settings.user_agent,
            "Accept": "application/json",
        }

    def article_url(self, title: str) -> str:
        base = str(self._settings.article_page_url).rstrip("/")
        return f"{base}/{quote(title, safe='')}"

    async def fetch_json(
        self, url: str, params: Optional[Mapping[str, Any]] = None
    ) -> Any:
        """GET ``url`` and decode JSON, retrying with exponential backoff.

        Timeouts and other failures share the retry schedule (base delay,
        doubling per attempt); what differs is the error raised once the
        retries are used up.

        Raises:
            RetrievalTimeout: The final attempt timed out.
            RetrievalTransportError: The final attempt failed otherwise.
        """
        client = self._get_http_client()
        retries = self._settings.retrieval_retries
        timeout_seconds = self._settings.retrieval_timeout_seconds
        timeout = httpx.Timeout(timeout_seconds)

        for attempt in range(retries + 1):
            is_last_attempt = attempt == retries
            try:
                # httpx limits each phase; wait_for bounds the whole request
                response = await asyncio.wait_for(
                    client.get(
                        url, params=params, headers=self._headers, timeout=timeout
                    ),
                    timeout_seconds,
                )
                response.raise_for_status()
                return response.json()
            except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
                logger.warning(
                    f"Request timeout (attempt {attempt + 1}/{retries + 1}): {url}"
                )
                if is_last_attempt:
                    raise RetrievalTimeout(
                        url, self._settings.retrieval_timeout_ms, retries + 1
                    ) from exc
            except httpx.HTTPStatusError as exc:
                logger.warning(
                    f"Request failed (attempt {attempt + 1}/{retries + 1}): {exc}"
                )
                if is_last_attempt:
                    raise RetrievalTransportError(
                        url,
                        exc.response.reason_phrase or str(exc),
                        status_code=exc.response.status_code,
                    ) from exc
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning(
                    f"Request failed (attempt {attempt + 1}/{retries + 1}): {exc}"
                )
                if is_last_attempt:
                    raise RetrievalTransportError(url, str(exc)) from exc

            delay_ms = self._settings.retrieval_backoff_base_ms * (2**attempt)
            logger.info(f"Retrying in {delay_ms}ms...")
            await asyncio.sleep(delay_ms / 1000)

        raise AssertionError("unreachable")  # pragma: no cover

    async def get_featured_summary(self, year: int, month: int, day: int) -> ArticleSummary:
        """Fetch the featured-article summary for a date.

        Raises:
            ContentNotFound: The feed has no featured article for the date.
        """
        base = str(self._settings.featured_feed_url).rstrip("/")
        url = f"{base}/{year:04d}/{month:02d}/{day:02d}"
        logger.info(f"Fetching featured article from API: {url}")

        data = await self.fetch_json(url)
        article = data.get("tfa") if isinstance(data, dict) else None
        if not article:
            raise ContentNotFound(f"featured article for {year:04d}-{month:02d}-{day:02d}")
        if not isinstance(article, dict):
            raise RetrievalTransportError(url, "Unexpected featured article payload")

        titles = article.get("titles")
        normalized = titles.get("normalized") if isinstance(titles, dict) else None
        title = normalized or article.get("title")
        if not isinstance(title, str) or not title:
            raise RetrievalTransportError(url, "Featured article has no title")
        extract = article.get("extract")
        return ArticleSummary(
            title=title,
            extract=extract if isinstance(extract, str) else "",
            source_url=self.article_url(title),
        )

    async def get_article(self, title: str) -> ContentItem:
        """Fetch the complete plain-text article for ``title``.

        Raises:
            ContentNotFound: The title does not resolve to a page.
        """
        params = {
            "action": "query",
            "format": "json",
            "prop": "extracts",
            "titles": title,
            "explaintext": 1,
            "redirects": 1,
        }
        logger.info(f"Fetching article from API: {title}")

        url = str(self._settings.article_api_url)
        data = await self.fetch_json(url, params=params)
        if not isinstance(data, dict):
            raise RetrievalTransportError(url, "Unexpected response payload")
        query = data.get("query") or {}
        if not isinstance(query, dict):
            raise RetrievalTransportError(url, "Unexpected response payload")
        pages = query.get("pages") or {}
        if not isinstance(pages, dict):
            raise RetrievalTransportError(url, "Unexpected response payload")
        if not pages:
            raise ContentNotFound(title)

        page = next(iter(pages.values()))
        if not isinstance(page, dict):
            raise RetrievalTransportError(url, "Unexpected page payload")
        if "missing" in page or "invalid" in page:
            raise ContentNotFound(title)

        page_title = page.get("title") or title
        extract = page.get("extract") or ""
        if not isinstance(page_title, str) or not isinstance(extract, str):
            raise RetrievalTransportError(url, "Unexpected page payload")
        return ContentItem(
            title=page_title,
            text=extract,
            source_url=self.article_url(page_title),
        )


__all__ = [
    "ContentNotFound",
    "RetrievalError",
    "RetrievalTimeout",
    "RetrievalTransportError",
    "WikipediaClient",
    "title_from_input",
]
