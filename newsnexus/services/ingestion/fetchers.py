"""HTTP clients for the external news aggregators."""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

import feedparser
import httpx
from httpx import HTTPStatusError, TimeoutException

from newsnexus.core.exceptions import APIClientError, APITimeoutError, RateLimitedError
from newsnexus.services.ingestion.contracts import ArticleItem
from newsnexus.services.ingestion.normalizers import normalize_articles, normalize_rss_entry
from newsnexus.utils.logging import get_logger

LOGGER = get_logger(__name__)


class BaseAggregatorClient:
    """Base client for aggregator HTTP calls.

    Handles timeouts, retry with exponential backoff and error mapping.
    An HTTP 503 is never retried: the aggregator is asking us to back off and
    the caller gets a ``RateLimitedError`` immediately.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        max_retries: int = 2,
        retry_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Endpoint URL
            timeout: Request timeout in seconds
            max_retries: Maximum number of attempts
            retry_delay: Base delay for exponential backoff
            transport: Optional httpx transport (tests use ``httpx.MockTransport``)
        """
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max(max_retries, 1)
        self.retry_delay = retry_delay
        self.transport = transport
        self.logger = LOGGER

    async def _get(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """GET with retry logic.

        Raises:
            RateLimitedError: On HTTP 503
            APIClientError: On 4xx or when retries are exhausted
            APITimeoutError: If every attempt timed out
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            for attempt in range(self.max_retries):
                try:
                    response = await client.get(url, params=params, headers=headers)
                    response.raise_for_status()
                    return response

                except HTTPStatusError as e:
                    status_code = e.response.status_code
                    self.logger.warning(
                        f"Aggregator HTTP error (Attempt {attempt + 1}/{self.max_retries})",
                        extra={"url": url, "status_code": status_code},
                    )
                    if status_code == 503:
                        raise RateLimitedError(
                            f"{self.__class__.__name__} returned HTTP 503. "
                            "Please wait before retrying.",
                            original_error=e,
                            details={"statusCode": 503},
                        ) from e
                    if 400 <= status_code < 500 and status_code != 429:
                        raise APIClientError(
                            f"Aggregator client error {status_code}",
                            original_error=e,
                            details={"statusCode": status_code},
                        ) from e
                    if attempt == self.max_retries - 1:
                        raise APIClientError(
                            f"Aggregator HTTP error {status_code} after retries",
                            original_error=e,
                            details={"statusCode": status_code},
                        ) from e

                except TimeoutException as e:
                    self.logger.warning(
                        f"Aggregator timeout (Attempt {attempt + 1}/{self.max_retries})",
                        extra={"url": url},
                    )
                    if attempt == self.max_retries - 1:
                        raise APITimeoutError(
                            f"Aggregator timeout after {self.max_retries} attempts",
                            original_error=e,
                        ) from e

                except httpx.HTTPError as e:
                    self.logger.warning(
                        f"Aggregator transport error (Attempt {attempt + 1}/{self.max_retries})",
                        extra={"url": url, "error": str(e)},
                    )
                    if attempt == self.max_retries - 1:
                        raise APIClientError(f"Aggregator error: {str(e)}", original_error=e) from e

                await asyncio.sleep(self.retry_delay * (2**attempt))

        raise APIClientError(f"Failed to call {url} after {self.max_retries} attempts")


class GoogleRssFetcher(BaseAggregatorClient):
    """Fetch and parse Google News RSS search results."""

    async def fetch(self, url: str) -> List[ArticleItem]:
        """Fetch an RSS search URL and return its items (nothing is stored).

        Raises:
            RateLimitedError: If Google News answers HTTP 503
            APIClientError: If the feed cannot be fetched or parsed
        """
        self.logger.info(f"Fetching Google RSS: {url}")
        response = await self._get(url)

        feed = feedparser.parse(response.text)
        if feed.bozo and not feed.entries:
            raise APIClientError(f"Invalid RSS feed: {feed.bozo_exception}")

        return [normalize_rss_entry(entry) for entry in feed.entries]


class NewsApiClient(BaseAggregatorClient):
    """Client for NewsAPI ``/v2/everything``."""

    ORG_NAME = "NewsAPI"

    def __init__(self, api_key: str, base_url: str, **kwargs):
        super().__init__(base_url, **kwargs)
        self.api_key = api_key

    def build_params(
        self,
        keyword_string: str,
        start_date: str,
        end_date: str,
        max_articles: int = 100,
    ) -> Dict[str, Any]:
        return {
            "q": keyword_string,
            "from": start_date,
            "to": end_date,
            "pageSize": max_articles,
            "language": "en",
        }

    def request_url(self, params: Dict[str, Any]) -> str:
        """URL recorded on the request row (without credentials)."""
        return str(httpx.URL(self.base_url, params=params))

    async def search(self, params: Dict[str, Any]) -> Tuple[List[ArticleItem], Dict[str, Any]]:
        """Run a search.

        Returns:
            (items, raw payload)

        Raises:
            APIClientError: If NewsAPI reports ``status == "error"``
        """
        response = await self._get(
            self.base_url, params=params, headers={"X-Api-Key": self.api_key}
        )
        payload = response.json()
        if payload.get("status") == "error":
            raise APIClientError(
                payload.get("message") or "NewsAPI request failed",
                details={"code": payload.get("code")},
            )
        return normalize_articles(payload, self.ORG_NAME), payload


class GNewsClient(BaseAggregatorClient):
    """Client for GNews ``/api/v4/search``."""

    ORG_NAME = "GNews"

    def __init__(self, api_key: str, base_url: str, **kwargs):
        super().__init__(base_url, **kwargs)
        self.api_key = api_key

    def build_params(
        self,
        keyword_string: str,
        start_date: str,
        end_date: str,
        max_articles: int = 100,
    ) -> Dict[str, Any]:
        return {
            "q": keyword_string,
            "from": f"{start_date}T00:00:00Z",
            "to": f"{end_date}T23:59:59Z",
            "max": max_articles,
            "lang": "en",
        }

    def request_url(self, params: Dict[str, Any]) -> str:
        return str(httpx.URL(self.base_url, params=params))

    async def search(self, params: Dict[str, Any]) -> Tuple[List[ArticleItem], Dict[str, Any]]:
        """Run a search.

        Raises:
            APIClientError: If GNews answers with an ``errors`` list
        """
        response = await self._get(self.base_url, params={**params, "apikey": self.api_key})
        payload = response.json()
        if payload.get("errors"):
            raise APIClientError(
                "GNews request failed", details={"errors": payload.get("errors")}
            )
        return normalize_articles(payload, self.ORG_NAME), payload
