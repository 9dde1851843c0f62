"""Session-token lifecycle for the Tripletex API.

Tripletex does not accept the consumer/employee tokens on ordinary calls.
They are exchanged for a session token at `PUT /token/session/:create`, and
the session token is then sent on every request as HTTP Basic credentials
with the literal username "0" (or the accountant's client company id) and the
session token as password.

`TokenManager` owns that session token: it knows whether it is still valid,
refreshes it lazily when it is not, and stamps outgoing requests.
`TripletexAuth` plugs the manager into an `httpx.AsyncClient`.

Example:
    ```python
    import httpx

    from tripletex_client.auth import Credentials, TokenManager, TripletexAuth

    credentials = Credentials(consumer_token="...", employee_token="...")
    async with httpx.AsyncClient(base_url="https://tripletex.no/v2") as http:
        manager = TokenManager(credentials, http_client=http)
        http.auth = TripletexAuth(manager)
        response = await http.get("/customer", params={"fields": "id,name"})
    ```
"""

import asyncio
import base64
import logging
from collections.abc import AsyncGenerator, Callable, Generator
from datetime import UTC, datetime, timedelta

import httpx
from dateutil.relativedelta import relativedelta

from tripletex_client.auth.credentials import Credentials
from tripletex_client.auth.exceptions import (
    AuthError,
    AuthTransportError,
    BadStatusError,
    BodyParseError,
    BodyReadError,
    EmptyResponseError,
    MalformedExpiryError,
    RequestConstructionError,
)
from tripletex_client.auth.token import Token, format_date, parse_date

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://tripletex.no/v2"
DEFAULT_TOKEN_DURATION = relativedelta(months=1)
TOKEN_PATH = "/token/session/:create"

# Username Tripletex expects alongside a session token
DEFAULT_USERNAME = "0"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def basic_auth_header(username: str, password: str) -> str:
    """Build an `Authorization` header value for HTTP Basic credentials."""
    userpass = f"{username}:{password}".encode()
    return "Basic " + base64.b64encode(userpass).decode("ascii")


class TokenManager:
    """Acquire, cache and refresh a Tripletex session token.

    Refresh is purely reactive: nothing happens until a call needs a valid
    token. Concurrent callers that find the token stale collapse into a single
    in-flight refresh and all receive its outcome. The manager never retries a
    failed refresh; retry policy belongs to the caller or the transport.

    Args:
        credentials: Consumer/employee tokens, optionally an accountant client id.
        http_client: Client used to reach the token endpoint. When omitted the
            manager creates one and closes it in `aclose()`.
        base_url: API root the token endpoint is resolved against.
        token_duration: Lifetime requested for new tokens. Calendar arithmetic
            (`relativedelta`) or a fixed `timedelta`.
        refresh_margin: Treat the token as stale this long before it expires.
        token: Previously issued token to start from.
        clock: Returns the current timezone-aware time.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
        base_url: str = DEFAULT_BASE_URL,
        token_duration: relativedelta | timedelta = DEFAULT_TOKEN_DURATION,
        refresh_margin: timedelta = timedelta(0),
        token: Token | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._credentials = credentials
        self._owns_client = http_client is None
        self._http_client = http_client if http_client is not None else httpx.AsyncClient()
        self.base_url = base_url.rstrip("/")
        self.token_duration = token_duration
        self.refresh_margin = refresh_margin
        self._clock = clock
        self._token = token

        self._lock = asyncio.Lock()
        # Bumped on every completed refresh attempt so waiters can tell that
        # someone else already refreshed while they queued on the lock.
        self._generation = 0
        self._last_error: AuthError | None = None

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def username(self) -> str:
        """Basic auth username: the accountant client id if set, otherwise "0"."""
        client_id = self._credentials.accountant_client_id
        return DEFAULT_USERNAME if client_id is None else str(client_id)

    def get_token(self) -> Token | None:
        return self._token

    def set_token(self, token: Token | None) -> None:
        self._token = token

    def is_valid(self) -> bool:
        """Return True if a token is held and has not reached its expiry."""
        token = self._token
        if token is None:
            return False
        return token.is_valid(self._clock(), self.refresh_margin)

    async def refresh(self) -> Token:
        """Request a new session token and install it.

        Always contacts the token endpoint, whether or not the current token is
        still valid. The held token is only replaced on success.

        Returns:
            The newly installed token.

        Raises:
            AuthError: One of its subclasses, describing the failure.
        """
        async with self._lock:
            return await self._refresh_locked()

    async def ensure_valid(self) -> Token:
        """Return a valid token, refreshing first if the held one is stale."""
        token = self._token
        if token is not None and self.is_valid():
            logger.debug("Session token still valid, skipping refresh")
            return token

        generation = self._generation
        async with self._lock:
            if self.is_valid():
                return self._token
            if self._generation != generation and self._last_error is not None:
                # The refresh we queued behind failed; share its outcome
                raise self._last_error
            return await self._refresh_locked()

    async def intercept(self, request: httpx.Request) -> httpx.Request:
        """Ensure a valid token and attach it to `request` as Basic credentials."""
        token = await self.ensure_valid()
        request.headers["Authorization"] = basic_auth_header(self.username, token.token)
        return request

    async def aclose(self) -> None:
        """Close the HTTP client if this manager created it."""
        if self._owns_client:
            await self._http_client.aclose()

    async def _refresh_locked(self) -> Token:
        try:
            token = await self._request_token()
        except AuthError as e:
            self._last_error = e
            self._generation += 1
            logger.warning(f"Session token refresh failed: {e}")
            raise

        self._token = token
        self._last_error = None
        self._generation += 1
        logger.info(f"Refreshed session token, expires {format_date(token.expires_at)}")
        return token

    async def _request_token(self) -> Token:
        expires_at = self._clock() + self.token_duration
        try:
            request = self._http_client.build_request(
                "PUT",
                f"{self.base_url}{TOKEN_PATH}",
                params={
                    "consumerToken": self._credentials.consumer_token,
                    "employeeToken": self._credentials.employee_token,
                    "expirationDate": format_date(expires_at),
                },
            )
        except (httpx.InvalidURL, ValueError, TypeError) as e:
            raise RequestConstructionError(f"Failed to create token request: {e}") from e

        logger.debug(f"Requesting session token from {self.base_url}{TOKEN_PATH}")
        try:
            # auth=None keeps the token request out of the interceptor
            response = await self._http_client.send(request, auth=None, stream=True)
        except httpx.HTTPError as e:
            raise AuthTransportError(f"Token request failed: {e}") from e

        try:
            if response.status_code != httpx.codes.OK:
                raise BadStatusError(
                    f"Token endpoint status not OK: {response.status_code} {response.reason_phrase}",
                    status_code=response.status_code,
                )
            try:
                await response.aread()
            except httpx.HTTPError as e:
                raise BodyReadError(f"Failed to read token response body: {e}") from e
        finally:
            await response.aclose()

        return self._parse_token_response(response)

    def _parse_token_response(self, response: httpx.Response) -> Token:
        try:
            payload = response.json()
        except ValueError as e:
            raise BodyParseError(f"Failed to parse token response body: {e}") from e
        if not isinstance(payload, dict):
            raise BodyParseError(f"Token response body is not an object: {type(payload).__name__}")

        value = payload.get("value")
        if not isinstance(value, dict):
            raise EmptyResponseError("Session token value is empty")

        expiration_date = value.get("expirationDate")
        if expiration_date is None:
            raise EmptyResponseError("Session token expirationDate is empty")

        bearer = value.get("token")
        if not bearer:
            raise EmptyResponseError("Session token string is empty")

        try:
            expires_at = parse_date(expiration_date)
        except (ValueError, TypeError) as e:
            raise MalformedExpiryError(
                f"Failed to parse expirationDate ({expiration_date!r}): {e}", raw_value=expiration_date
            ) from e

        return Token(token=bearer, expires_at=expires_at)


class TripletexAuth(httpx.Auth):
    """httpx auth flow that stamps every request with the session token.

    Only async clients are supported since refreshing needs to await the
    token endpoint.
    """

    def __init__(self, manager: TokenManager) -> None:
        self.manager = manager

    def sync_auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        raise RuntimeError("TripletexAuth requires an httpx.AsyncClient")

    async def async_auth_flow(self, request: httpx.Request) -> AsyncGenerator[httpx.Request, httpx.Response]:
        yield await self.manager.intercept(request)
