"""Tripletex error document model."""

from dataclasses import dataclass, field
from typing import Any

import httpx

# Keys Tripletex puts on every error response
ERROR_FIELDS = frozenset(["status", "code", "message", "link", "developerMessage", "validationMessages", "requestId"])


@dataclass
class ValidationMessage:
    """One entry of `validationMessages`."""

    field: str | None = None
    message: str | None = None
    path: str | None = None
    row_number: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ValidationMessage":
        return cls(
            field=data.get("field"),
            message=data.get("message"),
            path=data.get("path"),
            row_number=data.get("rowNumber"),
        )


@dataclass
class ErrorDetail:
    """Error body returned by the Tripletex API.

    Example body:
        {"status": 422, "code": 18000, "message": "Validering feilet.",
         "validationMessages": [{"field": "name", "message": "Feltet må fylles ut."}],
         "requestId": "3a1b..."}
    """

    status: int | None = None
    code: int | None = None  # Tripletex specific error code
    message: str | None = None
    link: str | None = None  # Documentation link for the error code
    developer_message: str | None = None
    request_id: str | None = None
    validation_messages: list[ValidationMessage] = field(default_factory=list)

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ErrorDetail | None":
        """Parse the error document from a response.

        Returns:
            ErrorDetail, or None if the body is not a Tripletex error document
        """
        try:
            data = response.json()
        except (ValueError, TypeError, AttributeError):
            return None

        if not isinstance(data, dict) or not any(key in data for key in ERROR_FIELDS):
            return None

        raw_messages = data.get("validationMessages") or []
        return cls(
            status=data.get("status"),
            code=data.get("code"),
            message=data.get("message"),
            link=data.get("link"),
            developer_message=data.get("developerMessage"),
            request_id=data.get("requestId"),
            validation_messages=[ValidationMessage.from_dict(m) for m in raw_messages if isinstance(m, dict)],
        )

    def to_exception_message(self) -> str:
        """Convert the error document to an exception message."""
        lines = []

        if self.message:
            lines.append(self.message)
        elif self.developer_message:
            lines.append(self.developer_message)

        if self.message and self.developer_message and self.message != self.developer_message:
            lines.append(self.developer_message)

        if self.code is not None:
            lines.append(f"Error code: {self.code}")

        for validation in self.validation_messages:
            lines.append(f"  - {validation.field or '<object>'}: {validation.message}")

        if self.request_id:
            lines.append(f"Request ID: {self.request_id}")

        return "\n".join(lines) if lines else "Unknown API error"
