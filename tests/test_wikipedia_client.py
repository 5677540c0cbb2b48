"""Tests for the Wikipedia retrieval client."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from magpie.config import Settings
from magpie.services.wikipedia import (
    ContentNotFound,
    RetrievalTimeout,
    RetrievalTransportError,
    WikipediaClient,
    title_from_input,
)


def make_client(handler, **overrides) -> WikipediaClient:
    settings = Settings(
        retrieval_backoff_base_ms=overrides.pop("retrieval_backoff_base_ms", 0),
        **overrides,
    )
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WikipediaClient(settings, http_client=http_client)


def _featured_payload(title: str, extract: str) -> dict:
    return {"tfa": {"title": title.replace(" ", "_"), "titles": {"normalized": title}, "extract": extract}}


@pytest.mark.asyncio
async def test_featured_summary():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_featured_payload("Black-billed magpie", "A bird."))

    client = make_client(handler)
    summary = await client.get_featured_summary(2024, 1, 5)

    assert summary.title == "Black-billed magpie"
    assert summary.extract == "A bird."
    assert summary.source_url == "https://en.wikipedia.org/wiki/Black-billed%20magpie"
    assert seen[0].url.path.endswith("/featured/2024/01/05")
    assert "Api-User-Agent" in seen[0].headers


@pytest.mark.asyncio
async def test_featured_summary_without_article():
    client = make_client(lambda request: httpx.Response(200, json={"mostread": {}}))

    with pytest.raises(ContentNotFound):
        await client.get_featured_summary(2024, 1, 5)


@pytest.mark.asyncio
async def test_get_article():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["titles"] == "Magpie"
        assert request.url.params["prop"] == "extracts"
        return httpx.Response(
            200,
            json={"query": {"pages": {"123": {"title": "Magpie", "extract": "Full text."}}}},
        )

    article = await make_client(handler).get_article("Magpie")

    assert article.title == "Magpie"
    assert article.text == "Full text."
    assert article.source_url == "https://en.wikipedia.org/wiki/Magpie"
    assert article.pending_completion is None


@pytest.mark.asyncio
async def test_get_article_missing():
    client = make_client(
        lambda request: httpx.Response(
            200, json={"query": {"pages": {"-1": {"title": "Nope", "missing": ""}}}}
        )
    )

    with pytest.raises(ContentNotFound, match="Nope"):
        await client.get_article("Nope")


@pytest.mark.asyncio
async def test_timeouts_retry_with_backoff_then_raise():
    attempts = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal attempts
        attempts += 1
        raise httpx.ReadTimeout("timed out", request=request)

    client = make_client(handler, retrieval_retries=2, retrieval_backoff_base_ms=1000)

    with patch("magpie.services.wikipedia.asyncio.sleep", new=AsyncMock()) as sleep:
        with pytest.raises(RetrievalTimeout) as excinfo:
            await client.fetch_json("https://example.org/feed")

    assert attempts == 3
    assert [call.args[0] for call in sleep.await_args_list] == [1.0, 2.0]
    assert excinfo.value.attempts == 3


@pytest.mark.asyncio
async def test_status_errors_surface_as_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    client = make_client(handler, retrieval_retries=1)

    with pytest.raises(RetrievalTransportError) as excinfo:
        await client.fetch_json("https://example.org/feed")

    assert excinfo.value.status_code == 503
    assert "HTTP 503" in str(excinfo.value)


@pytest.mark.asyncio
async def test_network_errors_surface_as_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler, retrieval_retries=0)

    with pytest.raises(RetrievalTransportError) as excinfo:
        await client.fetch_json("https://example.org/feed")

    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_recovers_after_transient_failure():
    responses = [httpx.Response(500), httpx.Response(200, json={"ok": True})]

    client = make_client(lambda request: responses.pop(0), retrieval_retries=2)

    assert await client.fetch_json("https://example.org/feed") == {"ok": True}
    assert responses == []


@pytest.mark.parametrize(
    "value, expected",
    [
        ("Magpie", "Magpie"),
        ("  Magpie  ", "Magpie"),
        ("https://en.wikipedia.org/wiki/Black-billed_magpie", "Black-billed_magpie"),
        ("en.m.wikipedia.org/wiki/Caf%C3%A9#History", "Café"),
        ("http://wikipedia.org/wiki/Magpie?action=view", "Magpie"),
    ],
)
def test_title_from_input(value, expected):
    assert title_from_input(value) == expected


@pytest.mark.asyncio
async def test_slow_response_is_bounded_by_overall_timeout():
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, json={"ok": True})

    client = make_client(handler, retrieval_retries=0, retrieval_timeout_ms=50)

    with pytest.raises(RetrievalTimeout) as excinfo:
        await client.fetch_json("https://example.org/feed")

    assert excinfo.value.attempts == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"query": []},
        {"query": {"pages": ["Magpie"]}},
        {"query": {"pages": {"1": "Magpie"}}},
        {"query": {"pages": {"1": {"title": "Magpie", "extract": ["Full."]}}}},
    ],
)
async def test_get_article_rejects_malformed_payload(payload):
    client = make_client(lambda request: httpx.Response(200, json=payload))

    with pytest.raises(RetrievalTransportError, match="Unexpected"):
        await client.get_article("Magpie")


@pytest.mark.asyncio
async def test_featured_summary_rejects_malformed_record():
    client = make_client(lambda request: httpx.Response(200, json={"tfa": ["Magpie"]}))

    with pytest.raises(RetrievalTransportError):
        await client.get_featured_summary(2024, 1, 5)
