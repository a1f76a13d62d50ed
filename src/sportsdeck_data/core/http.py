"""
Shared HTTP client infrastructure for the stat providers.

Provides BaseApiClient with rate limiting, retries, and error handling.
Every provider client (NBA API, API-Football, BallDontLie NFL) builds on it.

Usage:
    class MyClient(BaseApiClient):
        BASE_URL = "https://api.example.com"

        def __init__(self, api_key: str):
            super().__init__(
                headers={"Authorization": api_key},
                requests_per_minute=60,
            )

        async def get_data(self) -> dict:
            return await self._get("/data")
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ExternalAPIError(Exception):
    """Transport failure or non-2xx response from a provider."""

    def __init__(
        self,
        message: str,
        code: str = "EXTERNAL_API_ERROR",
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class RateLimitError(ExternalAPIError):
    """Exception raised when rate limit is exceeded."""

    def __init__(self, message: str, retry_after: int = 60):
        super().__init__(message, code="RATE_LIMITED", status_code=429)
        self.retry_after = retry_after


DEFAULT_RETRY_AFTER = 60


def parse_retry_after(value: Optional[str], now: Optional[datetime] = None) -> int:
    """
    Seconds to wait from a Retry-After header.

    Accepts both delta-seconds ("120") and an HTTP-date. Anything
    unreadable falls back to DEFAULT_RETRY_AFTER.
    """
    if value is None:
        return DEFAULT_RETRY_AFTER
    value = value.strip()
    try:
        return max(int(value), 0)
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return DEFAULT_RETRY_AFTER
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return max(int((when - now).total_seconds()), 0)


# ---------------------------------------------------------------------------
# Rate limiter
# ---------------------------------------------------------------------------

class RateLimiter:
    """Simple token bucket rate limiter for async API calls."""

    def __init__(self, requests_per_minute: int = 600):
        self.delay = 60.0 / requests_per_minute
        self._last_request = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait until we can make a request."""
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_request
            if elapsed < self.delay:
                await asyncio.sleep(self.delay - elapsed)
            self._last_request = time.monotonic()


# ---------------------------------------------------------------------------
# Base client
# ---------------------------------------------------------------------------

class BaseApiClient:
    """
    Async HTTP client base with rate limiting and retries.

    Subclasses set BASE_URL, configure auth, and add endpoint methods.
    The underlying ``httpx.AsyncClient`` is created lazily and lives until
    ``close()``; a ``transport`` can be injected for tests.
    """

    BASE_URL: str = ""

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, Any]] = None,
        requests_per_minute: int = 600,
        timeout: float = 30.0,
        max_retries: int = 3,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = (base_url or self.BASE_URL).rstrip("/")
        self._default_headers = headers or {}
        self._default_params = params or {}
        self._rate_limiter = RateLimiter(requests_per_minute)
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # -- Lifecycle -----------------------------------------------------------

    async def __aenter__(self) -> "BaseApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def client(self) -> httpx.AsyncClient:
        """Return the HTTP client, lazily creating it if needed."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._default_headers,
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    def is_configured(self) -> bool:
        """
        Check if the client has required configuration (API keys, etc.).

        Override in subclasses that need configuration validation.
        """
        return True

    # -- HTTP methods --------------------------------------------------------

    async def get_json(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """Public GET used by the paginated fetcher."""
        return await self._get(path, params)

    async def _get(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """Make a GET request with retries and rate limiting."""
        return await self._request("GET", path, params=params, headers=headers)

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """
        Make an HTTP request with retry logic and rate limiting.

        Returns the decoded JSON body (object or array).

        Raises:
            RateLimitError: If API returns 429 and retries are exhausted
            ExternalAPIError: If request fails after retries or the body is not JSON
        """
        merged_params = {**self._default_params, **(params or {})}
        request_headers = {**self._default_headers, **(headers or {})}
        last_error: Optional[Exception] = None

        for attempt in range(self._max_retries):
            try:
                await self._rate_limiter.acquire()
                response = await self.client.request(
                    method=method,
                    url=path,
                    params=merged_params,
                    headers=request_headers,
                )

                # Handle API rate limiting
                if response.status_code == 429:
                    retry_after = parse_retry_after(response.headers.get("retry-after"))
                    if attempt < self._max_retries - 1:
                        wait = min(retry_after, 30)
                        logger.warning(
                            "Rate limited by %s, waiting %ss (attempt %d)",
                            path, wait, attempt + 1,
                        )
                        await asyncio.sleep(wait)
                        continue
                    raise RateLimitError(
                        f"API rate limit exceeded. Try again in {retry_after} seconds.",
                        retry_after=retry_after,
                    )

                response.raise_for_status()
                try:
                    return response.json()
                except ValueError as e:
                    raise ExternalAPIError(
                        f"Invalid JSON from {path}: {e}",
                        code="INVALID_RESPONSE",
                        status_code=response.status_code,
                    ) from e

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                last_error = ExternalAPIError(
                    f"HTTP {status} from {path}: {e.response.text[:200]}",
                    status_code=status,
                )
                # Client errors (except 429) are not retryable
                if 400 <= status < 500:
                    raise last_error from e
                # Server errors: retry with backoff
                if attempt < self._max_retries - 1:
                    wait = 2 ** attempt
                    logger.warning("Request to %s failed, retrying in %ss: %s", path, wait, e)
                    await asyncio.sleep(wait)

            except httpx.RequestError as e:
                last_error = ExternalAPIError(f"Request to {path} failed: {e}")
                if attempt < self._max_retries - 1:
                    wait = 2 ** attempt
                    logger.warning("Request error on %s, retrying in %ss: %s", path, wait, e)
                    await asyncio.sleep(wait)

        raise last_error or ExternalAPIError("Request failed after retries")
