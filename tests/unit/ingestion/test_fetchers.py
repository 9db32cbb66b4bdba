"""Tests for the aggregator HTTP clients using httpx.MockTransport."""

import httpx
import pytest

from newsnexus.core.exceptions import APIClientError, APITimeoutError, RateLimitedError
from newsnexus.services.ingestion.fetchers import GNewsClient, GoogleRssFetcher, NewsApiClient

RSS_BODY = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"><channel><title>q</title>
<item><title>One</title><link>https://example.com/one</link>
<pubDate>Mon, 03 Mar 2025 10:00:00 GMT</pubDate><description>First</description></item>
<item><title>Two</title><link>https://example.com/two</link><description>Second</description></item>
</channel></rss>
"""

RSS_URL = "https://news.google.com/rss/search?q=fire"


def _transport(handler):
    calls = []

    def _handle(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return handler(request)

    return httpx.MockTransport(_handle), calls


class TestGoogleRssFetcher:

    async def test_fetch_parses_items(self):
        transport, calls = _transport(lambda request: httpx.Response(200, text=RSS_BODY))
        fetcher = GoogleRssFetcher(RSS_URL, transport=transport, retry_delay=0)

        items = await fetcher.fetch(RSS_URL)

        assert [item.link for item in items] == ["https://example.com/one", "https://example.com/two"]
        assert items[0].description == "First"
        assert len(calls) == 1

    async def test_503_is_rate_limited_without_retry(self):
        transport, calls = _transport(lambda request: httpx.Response(503))
        fetcher = GoogleRssFetcher(RSS_URL, transport=transport, max_retries=3, retry_delay=0)

        with pytest.raises(RateLimitedError):
            await fetcher.fetch(RSS_URL)
        assert len(calls) == 1

    async def test_500_is_retried_then_fails(self):
        transport, calls = _transport(lambda request: httpx.Response(500))
        fetcher = GoogleRssFetcher(RSS_URL, transport=transport, max_retries=2, retry_delay=0)

        with pytest.raises(APIClientError):
            await fetcher.fetch(RSS_URL)
        assert len(calls) == 2

    async def test_timeouts_raise_timeout_error(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        transport, calls = _transport(handler)
        fetcher = GoogleRssFetcher(RSS_URL, transport=transport, max_retries=2, retry_delay=0)

        with pytest.raises(APITimeoutError):
            await fetcher.fetch(RSS_URL)
        assert len(calls) == 2


class TestNewsApiClient:

    async def test_search_sends_key_header(self):
        payload = {
            "status": "ok",
            "articles": [{"url": "https://example.com/a", "title": "A", "source": {"name": "X"}}],
        }
        transport, calls = _transport(lambda request: httpx.Response(200, json=payload))
        client = NewsApiClient("secret", "https://newsapi.org/v2/everything", transport=transport)

        params = client.build_params("fire", "2025-03-01", "2025-03-02", 50)
        items, raw = await client.search(params)

        assert [item.link for item in items] == ["https://example.com/a"]
        assert raw == payload
        assert calls[0].headers["X-Api-Key"] == "secret"
        assert calls[0].url.params["pageSize"] == "50"
        assert "secret" not in client.request_url(params)

    async def test_error_status_raises(self):
        payload = {"status": "error", "code": "apiKeyInvalid", "message": "Your API key is invalid"}
        transport, _ = _transport(lambda request: httpx.Response(200, json=payload))
        client = NewsApiClient("bad", "https://newsapi.org/v2/everything", transport=transport)

        with pytest.raises(APIClientError) as exc_info:
            await client.search({"q": "fire"})
        assert exc_info.value.message == "Your API key is invalid"

    async def test_unauthorized_is_not_retried(self):
        transport, calls = _transport(lambda request: httpx.Response(401))
        client = NewsApiClient(
            "bad", "https://newsapi.org/v2/everything", transport=transport, max_retries=3
        )

        with pytest.raises(APIClientError):
            await client.search({"q": "fire"})
        assert len(calls) == 1


class TestGNewsClient:

    async def test_search_passes_api_key_and_dates(self):
        payload = {"totalArticles": 0, "articles": []}
        transport, calls = _transport(lambda request: httpx.Response(200, json=payload))
        client = GNewsClient("gkey", "https://gnews.io/api/v4/search", transport=transport)

        params = client.build_params("fire", "2025-03-01", "2025-03-02", 10)
        items, _ = await client.search(params)

        assert items == []
        sent = calls[0].url.params
        assert sent["apikey"] == "gkey"
        assert sent["from"] == "2025-03-01T00:00:00Z"
        assert sent["to"] == "2025-03-02T23:59:59Z"

    async def test_errors_field_raises(self):
        payload = {"errors": ["You did not provide an API key."]}
        transport, _ = _transport(lambda request: httpx.Response(200, json=payload))
        client = GNewsClient("", "https://gnews.io/api/v4/search", transport=transport)

        with pytest.raises(APIClientError):
            await client.search({"q": "fire"})
