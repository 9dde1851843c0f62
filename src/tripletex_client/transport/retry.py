"""Retry transport for the Tripletex API.

Tripletex rate limits per consumer token and answers 429 when the budget is
exhausted, announcing when it resets in `X-Rate-Limit-Reset` (seconds).
`RateLimitRetry` waits that long (or honours a standard `Retry-After`) and
retries any method on 429. Gateway errors (502, 503, 504) are retried for
idempotent methods only.

Example:
    ```python
    import httpx

    from tripletex_client.transport.retry import RateLimitRetry

    transport = RateLimitRetry(wrapped_transport=httpx.AsyncHTTPTransport(), max_retries=5)

    async with httpx.AsyncClient(transport=transport) as client:
        response = await client.get("https://tripletex.no/v2/customer")
    ```
"""

import asyncio
import logging
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

import httpx

logger = logging.getLogger(__name__)


class RateLimitRetry(httpx.AsyncHTTPTransport):
    """Retry transport that handles rate limiting and gateway errors.

    Args:
        wrapped_transport: The underlying transport to wrap
        max_retries: Maximum number of retry attempts (default: 5)
        backoff_factor: Multiplier for exponential backoff (default: 1.0)
        max_backoff: Maximum wait in seconds (default: 60)
        retry_5xx_status_codes: 5xx codes to retry (default: 502, 503, 504)
    """

    # Idempotent HTTP methods (per RFC 7231) - safe to retry on 5xx
    IDEMPOTENT_METHODS: frozenset[str] = frozenset(["HEAD", "GET", "PUT", "DELETE", "OPTIONS", "TRACE"])

    DEFAULT_RETRY_5XX_STATUS_CODES: frozenset[int] = frozenset([502, 503, 504])

    def __init__(
        self,
        *,
        wrapped_transport: httpx.AsyncBaseTransport,
        max_retries: int = 5,
        backoff_factor: float = 1.0,
        max_backoff: float = 60.0,
        retry_5xx_status_codes: frozenset[int] | None = None,
    ) -> None:
        self._wrapped_transport = wrapped_transport
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.max_backoff = max_backoff
        self.retry_5xx_status_codes = retry_5xx_status_codes or self.DEFAULT_RETRY_5XX_STATUS_CODES

    async def __aenter__(self):
        await self._wrapped_transport.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return await self._wrapped_transport.__aexit__(exc_type, exc_val, exc_tb)

    async def aclose(self) -> None:
        await self._wrapped_transport.aclose()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        """Send the request, retrying on rate limiting and gateway errors."""
        retries = 0

        while True:
            try:
                response = await self._wrapped_transport.handle_async_request(request)
            except httpx.TransportError as e:
                # Connection failures are only retried for idempotent methods
                if retries >= self.max_retries or request.method not in self.IDEMPOTENT_METHODS:
                    raise
                retries += 1
                delay = self._calculate_backoff_delay(retries)
                logger.warning(
                    f"Request {request.method} {request.url.path} failed with {e!r}, "
                    f"retrying in {delay}s (attempt {retries}/{self.max_retries})"
                )
                await asyncio.sleep(delay)
                continue

            delay = self._retry_delay(request, response, retries)
            if delay is None:
                return response

            retries += 1
            logger.warning(
                f"Request {request.method} {request.url.path} failed with {response.status_code}, "
                f"retrying in {delay}s (attempt {retries}/{self.max_retries})"
            )
            await response.aclose()
            await asyncio.sleep(delay)

    def _retry_delay(self, request: httpx.Request, response: httpx.Response, current_retries: int) -> float | None:
        """Return how long to wait before retrying, or None to stop."""
        if current_retries >= self.max_retries:
            return None

        if response.status_code == 429:
            delay = self._parse_rate_limit_reset(response)
            if delay is None:
                delay = self._calculate_backoff_delay(current_retries + 1)
            return delay

        if response.status_code in self.retry_5xx_status_codes and request.method in self.IDEMPOTENT_METHODS:
            return self._calculate_backoff_delay(current_retries + 1)

        return None

    def _parse_rate_limit_reset(self, response: httpx.Response) -> float | None:
        """Parse `Retry-After` (seconds or HTTP-date) or `X-Rate-Limit-Reset` (seconds).

        Returns:
            Delay in seconds capped at max_backoff, or None if absent or invalid
        """
        retry_after = response.headers.get("Retry-After")
        if retry_after:
            try:
                delay = float(int(retry_after))
            except ValueError:
                try:
                    delay = (parsedate_to_datetime(retry_after) - datetime.now(UTC)).total_seconds()
                except (ValueError, TypeError):
                    delay = None
            if delay is not None and delay >= 0:
                return min(delay, self.max_backoff)

        reset = response.headers.get("X-Rate-Limit-Reset")
        if reset:
            try:
                delay = float(int(reset))
            except ValueError:
                return None
            if delay >= 0:
                return min(delay, self.max_backoff)

        return None

    def _calculate_backoff_delay(self, retry_number: int) -> float:
        """Exponential backoff: backoff_factor * 2 ** (retry_number - 1), capped at max_backoff."""
        delay = self.backoff_factor * (2 ** (retry_number - 1))
        return min(delay, self.max_backoff)
