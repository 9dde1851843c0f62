"""Custom exceptions for credential resolution and session-token authentication.

Two families live here:

- Credential errors, raised while resolving consumer/employee tokens from
  explicit values, the environment, `.env` files or persisted token files.
- Auth errors, raised by `TokenManager` when a session token cannot be
  issued. Every auth error is terminal for the call that triggered it; the
  token manager never retries.

Example:
    ```python
    from tripletex_client.auth.exceptions import AuthError, BadStatusError

    try:
        await manager.ensure_valid()
    except BadStatusError as e:
        print(f"Token endpoint answered {e.status_code}")
    except AuthError as e:
        print(f"Could not authenticate: {e}")
    ```
"""


class CredentialError(Exception):
    """Base exception for credential-related errors.

    All credential-specific exceptions inherit from this class,
    making it easy to catch any credential-related error.
    """

    pass


class CredentialNotFoundError(CredentialError):
    """Raised when a required credential cannot be resolved.

    Attributes:
        env_var_name: The environment variable name that was checked (if any).
    """

    def __init__(self, message: str, env_var_name: str | None = None):
        super().__init__(message)
        self.env_var_name = env_var_name


class CredentialFileError(CredentialError):
    """Raised when a persisted token file cannot be read or decoded."""

    pass


class AuthError(Exception):
    """Base exception for session-token failures.

    The outer API call is never attempted when one of these is raised from
    the request interceptor.
    """

    pass


class RequestConstructionError(AuthError):
    """The token issuance request could not be built (e.g. invalid base URL)."""

    pass


class AuthTransportError(AuthError):
    """The token issuance request failed at the transport level."""

    pass


class BadStatusError(AuthError):
    """The token endpoint answered with something other than 200 OK.

    Attributes:
        status_code: HTTP status code returned by the token endpoint.
    """

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class BodyReadError(AuthError):
    """The token endpoint's response body could not be read."""

    pass


class BodyParseError(AuthError):
    """The token endpoint's response body is not a JSON object."""

    pass


class EmptyResponseError(AuthError):
    """The response lacks the `value` wrapper, its token, or its expiration date."""

    pass


class MalformedExpiryError(AuthError):
    """The returned expiration date is not a `YYYY-MM-DD` date."""

    def __init__(self, message: str, raw_value: object = None):
        super().__init__(message)
        self.raw_value = raw_value
