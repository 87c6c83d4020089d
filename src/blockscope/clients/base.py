"""Base async HTTP client with retries and connection pooling.

Remote clients inherit from this base for consistent behavior:
- Async/await for non-blocking I/O
- One pooled httpx.AsyncClient per context manager
- Automatic retries with exponential backoff on transient failures
- Every failure surfaced as UpstreamUnavailable

Usage:
    class MyClient(BaseAsyncClient):
        async def get_thing(self, thing_id: int) -> dict:
            return await self.get(f"/things/{thing_id}")

    async with MyClient(base_url="https://api.example.com") as client:
        thing = await client.get_thing(1)
"""

import asyncio
import logging
from typing import Any

import httpx


logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 502, 503, 504}
_DEFAULT_MAX_RETRIES = 3
_DEFAULT_BACKOFF = 1.0  # seconds


class UpstreamUnavailable(Exception):
    """Remote API request failed (network, timeout, non-2xx or bad payload)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class BaseAsyncClient:
    """Base async HTTP client.

    Args:
        base_url: Base URL for all requests
        headers: Default headers for all requests
        timeout: Request timeout in seconds (default: 30)
        max_retries: Retries after the first attempt on transient failures
        backoff: Initial backoff in seconds, doubled on every retry
    """

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        max_retries: int = _DEFAULT_MAX_RETRIES,
        backoff: float = _DEFAULT_BACKOFF,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.headers = headers or {}
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff = backoff
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "BaseAsyncClient":
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.timeout,
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _retry_or_raise(self, attempt: int, endpoint: str, error: UpstreamUnavailable) -> None:
        """Sleep before the next attempt, or raise if retries are exhausted."""
        if attempt >= self.max_retries:
            logger.error("Request to %s failed: %s", endpoint, error)
            raise error

        delay = self.backoff * (2 ** attempt)
        logger.warning(
            "%s for %s, retrying in %.1fs (attempt %d/%d)",
            error, endpoint, delay, attempt + 1, self.max_retries + 1,
        )
        await asyncio.sleep(delay)

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make an HTTP request with retries and error handling.

        Retries on 429/502/503/504, timeouts and network errors. Other
        failures raise immediately.

        Returns:
            Parsed JSON response

        Raises:
            UpstreamUnavailable: If the request fails after all retries
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use async with context manager.")

        if not endpoint.startswith("/"):
            endpoint = f"/{endpoint}"

        for attempt in range(self.max_retries + 1):
            logger.debug(
                "%s %s%s params=%s (attempt %d/%d)",
                method, self.base_url, endpoint, params, attempt + 1, self.max_retries + 1,
            )

            try:
                response = await self._client.request(method=method, url=endpoint, params=params)
            except httpx.TimeoutException as e:
                await self._retry_or_raise(attempt, endpoint, UpstreamUnavailable(f"Request timeout: {e}"))
                continue
            except httpx.NetworkError as e:
                await self._retry_or_raise(attempt, endpoint, UpstreamUnavailable(f"Network error: {e}"))
                continue
            except httpx.HTTPError as e:
                logger.error("HTTP error for %s: %s", endpoint, e)
                raise UpstreamUnavailable(f"HTTP error: {e}") from e

            logger.debug("Response: %d for %s", response.status_code, endpoint)

            if not response.is_success:
                error = UpstreamUnavailable(
                    message=f"Request failed with status code {response.status_code}",
                    status_code=response.status_code,
                    response_body=response.text[:500],
                )
                if response.status_code in _RETRYABLE_STATUS_CODES:
                    await self._retry_or_raise(attempt, endpoint, error)
                    continue
                logger.error("API error: %d %s - %s", response.status_code, endpoint, error.response_body)
                raise error

            try:
                return response.json()
            except ValueError as e:
                logger.error("Failed to parse JSON response: %s", e)
                raise UpstreamUnavailable(
                    message=f"Invalid JSON response: {e}",
                    status_code=response.status_code,
                    response_body=response.text[:500],
                ) from e

        # Unreachable: the last attempt always returns or raises
        raise UpstreamUnavailable("Request failed after retries")

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """Convenience method for GET requests."""
        return await self._request("GET", endpoint, params=params)
