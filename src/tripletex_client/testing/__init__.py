"""Testing utilities for Tripletex clients.

Helpers to fake the session token endpoint with `httpx.MockTransport`.

Example:
    ```python
    import httpx

    from tripletex_client.testing import SessionTokenEndpoint

    endpoint = SessionTokenEndpoint(token="abc", expiration_date="2030-01-01")
    http = httpx.AsyncClient(transport=httpx.MockTransport(endpoint))
    manager = TokenManager(credentials, http_client=http)
    await manager.ensure_valid()
    assert endpoint.calls == 1
    ```
"""

from collections.abc import Callable
from typing import Any

import httpx

TOKEN_ENDPOINT_SUFFIX = "/token/session/:create"


def session_token_payload(token: str = "test-session-token", expiration_date: str = "2099-01-01") -> dict[str, Any]:
    """Body of a successful `PUT /token/session/:create` response."""
    return {"value": {"id": 1, "version": 1, "token": token, "expirationDate": expiration_date}}


class SessionTokenEndpoint:
    """`httpx.MockTransport` handler serving the token endpoint.

    Other requests are passed to `fallback` (404 if none is given).

    Attributes:
        calls: Number of token requests served.
        last_params: Query parameters of the most recent token request.
        requests: Every non-token request seen, in order.
    """

    def __init__(
        self,
        token: str = "test-session-token",
        expiration_date: str = "2099-01-01",
        *,
        status_code: int = 200,
        json: Any = None,
        content: bytes | None = None,
        fallback: Callable[[httpx.Request], httpx.Response] | None = None,
    ) -> None:
        self.token = token
        self.expiration_date = expiration_date
        self.status_code = status_code
        self.json = json
        self.content = content
        self.fallback = fallback
        self.calls = 0
        self.last_params: dict[str, str] = {}
        self.requests: list[httpx.Request] = []

    def respond_with(
        self, *, status_code: int = 200, json: Any = None, content: bytes | None = None
    ) -> "SessionTokenEndpoint":
        """Change what later token requests receive."""
        self.status_code = status_code
        self.json = json
        self.content = content
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith(TOKEN_ENDPOINT_SUFFIX):
            self.calls += 1
            self.last_params = dict(request.url.params)
            if self.content is not None:
                return httpx.Response(self.status_code, content=self.content)
            body = self.json if self.json is not None else session_token_payload(self.token, self.expiration_date)
            return httpx.Response(self.status_code, json=body)

        self.requests.append(request)
        if self.fallback is not None:
            return self.fallback(request)
        return httpx.Response(404, json={"status": 404, "message": "Object not found"})


__all__ = ["SessionTokenEndpoint", "session_token_payload"]
