"""Tripletex API client.

`TripletexClient` ties the runtime pieces together: one `httpx.AsyncClient`
with the retry transport underneath and `TripletexAuth` on top, shared with
the `TokenManager` that issues session tokens. Generated endpoint operations
go through `request()`.

Example:
    ```python
    from tripletex_client import FieldsBuilder, TripletexClient

    async with TripletexClient.from_env() as client:
        response = await client.get(
            "/customer",
            params={"changedSince": "2024-01-01"},
            fields=FieldsBuilder().add("id").add("name"),
        )
        customers = response.json()["values"]
    ```
"""

import logging
from typing import Any

import httpx

from tripletex_client.auth.credentials import CredentialResolver, Credentials
from tripletex_client.auth.manager import TokenManager, TripletexAuth
from tripletex_client.auth.token import Token
from tripletex_client.config import ClientConfig
from tripletex_client.errors.handler import raise_for_status
from tripletex_client.fields import FieldsBuilder
from tripletex_client.transport import create_transport

logger = logging.getLogger(__name__)


class TripletexClient:
    """Authenticated client for the Tripletex REST API.

    The session token is fetched lazily on the first request and refreshed
    whenever it has expired. Reuse an issued token across processes with
    `get_token()` / `set_token()` or `ClientConfig.token`.

    Args:
        credentials: Consumer/employee tokens, optionally an accountant client id.
        config: Client options; defaults to `ClientConfig()`.
        transport: Innermost transport, wrapped by the retry layer.
    """

    def __init__(
        self,
        credentials: Credentials,
        config: ClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._http = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            transport=create_transport(max_retries=self.config.max_retries, wrapped_transport=transport),
            headers={"Accept": "application/json"},
        )
        self._token_manager = TokenManager(
            credentials,
            http_client=self._http,
            base_url=self.config.base_url,
            token_duration=self.config.token_duration,
            refresh_margin=self.config.refresh_margin,
            token=self.config.token,
        )
        self._http.auth = TripletexAuth(self._token_manager)

    @classmethod
    def from_env(
        cls,
        resolver: CredentialResolver | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        **config_overrides,
    ) -> "TripletexClient":
        """Create a client from `TRIPLETEX_*` environment variables or a .env file."""
        resolver = resolver or CredentialResolver()
        credentials = resolver.resolve_credentials()
        config = ClientConfig.from_env(resolver, **config_overrides)
        return cls(credentials, config, transport=transport)

    @property
    def token_manager(self) -> TokenManager:
        return self._token_manager

    @property
    def http(self) -> httpx.AsyncClient:
        """The underlying authenticated httpx client."""
        return self._http

    def get_token(self) -> Token | None:
        return self._token_manager.get_token()

    def set_token(self, token: Token | None) -> None:
        self._token_manager.set_token(token)

    def is_token_valid(self) -> bool:
        return self._token_manager.is_valid()

    async def check_auth(self) -> Token:
        """Make sure a valid session token is held, refreshing if needed."""
        return await self._token_manager.ensure_valid()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        fields: FieldsBuilder | str | None = None,
    ) -> httpx.Response:
        """Send an authenticated request.

        Args:
            method: HTTP method.
            path: Path relative to the base URL, e.g. "/customer".
            params: Query parameters.
            json: JSON request body.
            fields: Field selection, sent verbatim as the `fields` parameter.

        Returns:
            The successful response.

        Raises:
            AuthError: If no session token could be obtained; the request is
                not sent.
            APIError: If the API answered with a non-2xx status.
        """
        query = dict(params or {})
        if fields is not None:
            selection = str(fields)
            if selection:
                query["fields"] = selection

        response = await self._http.request(method, path, params=query or None, json=json)
        if not response.is_success:
            logger.debug(f"{method} {path} failed with {response.status_code}")
        raise_for_status(response)
        return response

    async def get(self, path: str, **kwargs) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs) -> httpx.Response:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs) -> httpx.Response:
        return await self.request("DELETE", path, **kwargs)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "TripletexClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
