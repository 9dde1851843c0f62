"""Session token value object.

A `Token` is the bearer string issued by `PUT /token/session/:create`
together with the absolute instant it stops being accepted. Tokens are
immutable; a refresh replaces the whole object.

Example:
    ```python
    import json

    token = manager.get_token()
    Path("token.json").write_text(json.dumps(token.to_dict()))

    # Later, in another process
    manager.set_token(Token.from_dict(json.loads(Path("token.json").read_text())))
    ```
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

# Tripletex exchanges expiration dates without a time-of-day component.
DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class Token:
    """Session token and its expiry.

    Attributes:
        token: Opaque bearer string, sent as the Basic auth password.
        expires_at: Timezone-aware instant after which the token is stale.
    """

    token: str
    expires_at: datetime

    def __post_init__(self) -> None:
        if self.expires_at.tzinfo is None:
            # Naive datetimes are taken to be UTC
            object.__setattr__(self, "expires_at", self.expires_at.replace(tzinfo=UTC))

    def __repr__(self) -> str:
        return f"Token(token='***', expires_at={self.expires_at.isoformat()})"

    def is_valid(self, now: datetime, margin: timedelta = timedelta(0)) -> bool:
        """Return True while `now + margin` is strictly before the expiry."""
        return now + margin < self.expires_at

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-ready mapping."""
        return {"token": self.token, "expiresAt": self.expires_at.isoformat()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Token":
        """Rebuild a token persisted with `to_dict`.

        Raises:
            KeyError: If either key is missing.
            ValueError: If `expiresAt` is not an ISO-8601 timestamp.
        """
        return cls(token=data["token"], expires_at=datetime.fromisoformat(data["expiresAt"]))


def format_date(value: datetime) -> str:
    """Render a datetime as the date-only string Tripletex expects."""
    return value.strftime(DATE_FORMAT)


def parse_date(value: str) -> datetime:
    """Parse a `YYYY-MM-DD` string into midnight UTC of that day.

    Raises:
        ValueError: If the string does not match the date-only format.
        TypeError: If the value is not a string.
    """
    return datetime.strptime(value, DATE_FORMAT).replace(tzinfo=UTC)
