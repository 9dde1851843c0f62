"""Error handling for Tripletex API responses."""

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
from tripletex_client.errors.handler import parse_retry_after, raise_for_status
from tripletex_client.errors.models import ErrorDetail, ValidationMessage

__all__ = [
    "APIError",
    "BadRequestError",
    "ClientError",
    "ConflictError",
    "ErrorDetail",
    "ForbiddenError",
    "NotFoundError",
    "RateLimitError",
    "ServerError",
    "UnauthorizedError",
    "ValidationError",
    "ValidationMessage",
    "parse_retry_after",
    "raise_for_status",
]
