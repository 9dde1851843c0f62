"""Error handling utilities for HTTP responses."""

import httpx

from tripletex_client.errors.exceptions import (
    APIError,
    BadRequestError,
    ClientError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ServerError,
    UnauthorizedError,
    ValidationError,
)
from tripletex_client.errors.models import ErrorDetail

EXCEPTION_MAP: dict[int, type[APIError]] = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
    429: RateLimitError,
}


def parse_retry_after(response: httpx.Response) -> int | None:
    """Seconds to wait before retrying, from `Retry-After` or `X-Rate-Limit-Reset`."""
    for header in ("retry-after", "x-rate-limit-reset"):
        if header in response.headers:
            try:
                return int(response.headers[header])
            except (ValueError, TypeError):
                continue
    return None


def raise_for_status(response: httpx.Response) -> None:
    """Raise appropriate exception for HTTP error responses.

    Parses the Tripletex error document if present, otherwise uses the
    standard HTTP status code to exception mapping.

    Args:
        response: HTTP response object

    Raises:
        APIError subclass based on status code
    """
    if response.is_success:
        return

    error_detail = ErrorDetail.from_response(response)
    status_code = response.status_code

    if status_code in EXCEPTION_MAP:
        exc_class = EXCEPTION_MAP[status_code]
    elif 400 <= status_code < 500:
        exc_class = ClientError
    elif 500 <= status_code < 600:
        exc_class = ServerError
    else:
        exc_class = APIError

    if error_detail:
        message = f"HTTP {status_code}: {error_detail.to_exception_message()}"
    else:
        response_text = response.text[:200]
        message = f"HTTP {status_code}: {response_text}" if response_text else f"HTTP {status_code}"

    kwargs = {"status_code": status_code, "response": response, "error_detail": error_detail}

    if exc_class is RateLimitError:
        raise RateLimitError(message, retry_after=parse_retry_after(response), **kwargs)

    if exc_class is ValidationError:
        validation_messages = error_detail.validation_messages if error_detail else None
        raise ValidationError(message, validation_messages=validation_messages, **kwargs)

    raise exc_class(message, **kwargs)
