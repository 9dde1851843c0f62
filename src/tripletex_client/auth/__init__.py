"""Authentication components for Tripletex clients.

This module provides:
- Credential resolution (value → env → .env → default)
- The session token value object and its persistence format
- `TokenManager`, which issues and caches session tokens
- `TripletexAuth`, the httpx auth flow that injects them

Example:
    ```python
    from tripletex_client.auth import CredentialResolver, TokenManager

    credentials = CredentialResolver().resolve_credentials()
    manager = TokenManager(credentials)
    token = await manager.ensure_valid()
    ```
"""

from tripletex_client.auth.credentials import CredentialResolver, Credentials
from tripletex_client.auth.exceptions import (
    AuthError,
    AuthTransportError,
    BadStatusError,
    BodyParseError,
    BodyReadError,
    CredentialError,
    CredentialFileError,
    CredentialNotFoundError,
    EmptyResponseError,
    MalformedExpiryError,
    RequestConstructionError,
)
from tripletex_client.auth.manager import TokenManager, TripletexAuth, basic_auth_header
from tripletex_client.auth.token import Token

__all__ = [
    "AuthError",
    "AuthTransportError",
    "BadStatusError",
    "BodyParseError",
    "BodyReadError",
    "CredentialError",
    "CredentialFileError",
    "CredentialNotFoundError",
    "CredentialResolver",
    "Credentials",
    "EmptyResponseError",
    "MalformedExpiryError",
    "RequestConstructionError",
    "Token",
    "TokenManager",
    "TripletexAuth",
    "basic_auth_header",
]
