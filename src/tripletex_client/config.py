"""Client configuration."""

from dataclasses import dataclass, field
from datetime import timedelta

from dateutil.relativedelta import relativedelta

from tripletex_client.auth.credentials import CredentialResolver
from tripletex_client.auth.manager import DEFAULT_BASE_URL, DEFAULT_TOKEN_DURATION
from tripletex_client.auth.token import Token


@dataclass
class ClientConfig:
    """Options for `TripletexClient`.

    Attributes:
        base_url: API root. Use "https://api-test.tripletex.tech/v2" for the
            test environment.
        token_duration: Lifetime requested for new session tokens. Defaults to
            one calendar month.
        refresh_margin: Refresh this long before the token expires. Zero means
            the token is used until its expiry instant.
        token: Previously issued session token to start from.
        timeout: HTTP timeout in seconds.
        max_retries: Retries on 429 and gateway errors. Zero disables retrying.
    """

    base_url: str = DEFAULT_BASE_URL
    token_duration: relativedelta | timedelta = field(default_factory=lambda: DEFAULT_TOKEN_DURATION)
    refresh_margin: timedelta = field(default_factory=timedelta)
    token: Token | None = None
    timeout: float = 30.0
    max_retries: int = 5

    @classmethod
    def from_env(cls, resolver: CredentialResolver | None = None, **overrides) -> "ClientConfig":
        """Build a config whose base URL may come from `TRIPLETEX_BASE_URL`."""
        resolver = resolver or CredentialResolver()
        base_url = resolver.resolve_base_url(value=overrides.pop("base_url", None), default=DEFAULT_BASE_URL)
        return cls(base_url=base_url, **overrides)
