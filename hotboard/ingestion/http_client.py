"""
HTTP transport layer for feed fetching.

Provides:
- HTTPClient: Async HTTP client with an identifying user agent, an explicit
  timeout and a typed error surface (NetworkError / FetchTimeoutError).

This layer separates HTTP concerns from domain logic (normalization) in the
adapters. There is no retry: a failed fetch is terminal for the
current run and the next scheduled cycle tries again.
"""

import json
import logging
from typing import Any

import httpx

from hotboard import __version__
from hotboard.ingestion.errors import FetchTimeoutError, NetworkError, ParseError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = f"hotboard/{__version__} (+feed snapshot)"

# Only this much of an error response body is kept for diagnostics
_MAX_ERROR_BODY = 500

RSS_ACCEPT = "application/rss+xml, application/xml;q=0.9, text/xml;q=0.9, */*;q=0.5"
JSON_ACCEPT = "application/json"


class HTTPClient:
    """
    Async HTTP client for upstream feeds and APIs.

    Features:
    - Identifying User-Agent on every request
    - Explicit per-request timeout surfaced as FetchTimeoutError
    - Any non-2xx status surfaced as NetworkError carrying the status code
    - Context manager for proper resource cleanup

    Example:
        async with HTTPClient(timeout=10.0) as client:
            xml = await client.fetch_text("https://example.com/feed")
            payload = await client.fetch_json("https://api.example.com/v2/hot")
    """

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds.
            user_agent: Value of the User-Agent header sent with every request.
            transport: Optional httpx transport (used by tests).
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HTTPClient":
        """Enter async context manager, create client."""
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent},
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager, close client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        Perform a single GET request.

        Args:
            url: Request URL
            headers: Extra request headers

        Returns:
            httpx.Response with a 2xx status

        Raises:
            FetchTimeoutError: When the request times out
            NetworkError: On connection errors or non-2xx status
        """
        if not self._client:
            raise RuntimeError("HTTPClient must be used as async context manager")

        try:
            response = await self._client.get(url, headers=headers)
        except httpx.TimeoutException as e:
            raise FetchTimeoutError(
                f"Request to {url} timed out after {self.timeout}s"
            ) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Request to {url} failed: {type(e).__name__}: {e}") from e

        if not response.is_success:
            raise NetworkError(
                f"Request to {url} failed with status {response.status_code}",
                status_code=response.status_code,
                response_body=response.text[:_MAX_ERROR_BODY],
            )

        logger.debug(f"GET {url} -> {response.status_code} ({len(response.content)} bytes)")
        return response

    async def fetch_text(self, url: str) -> str:
        """Fetch a feed document as decoded text."""
        response = await self.get(url, headers={"Accept": RSS_ACCEPT})
        return response.text

    async def fetch_json(self, url: str) -> Any:
        """
        Fetch and parse a JSON document.

        Raises:
            ParseError: If the body is not valid JSON
        """
        response = await self.get(url, headers={"Accept": JSON_ACCEPT})
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"Invalid JSON from {url}: {e}") from e
