"""Transport layer for Tripletex clients.

Transports wrap httpx's AsyncHTTPTransport to add retry behaviour below the
auth layer, so a retried request keeps its Authorization header.

Example:
    ```python
    from tripletex_client.transport import create_transport

    transport = create_transport(max_retries=3)
    ```
"""

import httpx

from tripletex_client.transport.retry import RateLimitRetry


def create_transport(
    *,
    max_retries: int = 5,
    max_backoff: float = 60.0,
    wrapped_transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncBaseTransport:
    """Build the default transport stack.

    Args:
        max_retries: Retries on 429/5xx. Zero disables the retry layer.
        max_backoff: Upper bound for a single wait, in seconds.
        wrapped_transport: Innermost transport, e.g. `httpx.MockTransport` in tests.
    """
    inner = wrapped_transport if wrapped_transport is not None else httpx.AsyncHTTPTransport()
    if max_retries <= 0:
        return inner
    return RateLimitRetry(wrapped_transport=inner, max_retries=max_retries, max_backoff=max_backoff)


__all__ = ["RateLimitRetry", "create_transport"]
