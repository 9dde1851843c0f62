"""Exceptions raised for failed Tripletex API calls.

`raise_for_status` picks the class from the HTTP status; `error_detail` holds
the parsed Tripletex error document when the body had one.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from tripletex_client.errors.models import ErrorDetail, ValidationMessage


class APIError(Exception):
    """A Tripletex API call returned a non-success status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response: "httpx.Response | None" = None,
        error_detail: "ErrorDetail | None" = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response = response
        self.error_detail = error_detail

    @property
    def request_id(self) -> str | None:
        """Tripletex request id, useful when contacting their support."""
        return self.error_detail.request_id if self.error_detail else None


class ClientError(APIError):
    """Tripletex rejected the request (4xx)."""


class BadRequestError(ClientError):
    """400: malformed query, e.g. an unknown name in the `fields` parameter."""


class UnauthorizedError(ClientError):
    """401: the session token is expired or revoked, or the Basic username is wrong.

    With an accountant login the username must be the client company id.
    """


class ForbiddenError(ClientError):
    """403: the employee token lacks access to this module or company."""


class NotFoundError(ClientError):
    """404: no object with that id, or the endpoint does not exist."""


class ConflictError(ClientError):
    """409: the object changed since it was read (stale `version`) or a duplicate exists."""


class ValidationError(ClientError):
    """422: one or more fields failed validation.

    `validation_messages` lists the offending fields as reported by Tripletex.
    """

    def __init__(self, message: str, validation_messages: "list[ValidationMessage] | None" = None, **kwargs):
        super().__init__(message, **kwargs)
        self.validation_messages = validation_messages if validation_messages is not None else []


class RateLimitError(ClientError):
    """429: the consumer token's request quota is used up.

    `retry_after` is the number of seconds until the quota resets, when known.
    """

    def __init__(self, message: str, retry_after: int | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(APIError):
    """Tripletex failed to handle the request (5xx)."""
