"""Framework exception types."""

from __future__ import annotations

from typing import Any

from .http import Status, ensure_status, reason_phrase
from .serialization import json_encode


class PraetorError(Exception):
    """Base error type."""


class ConfigurationError(PraetorError):
    """Raised when admin configuration cannot be loaded or validated."""


class RegistrationError(PraetorError):
    """Raised by the host when a middleware, group, or command name is already taken."""


class HTTPError(PraetorError):
    """Structured HTTP error that is msgspec serializable."""

    def __init__(self, status: int | Status, detail: Any) -> None:
        status_code = ensure_status(status)
        super().__init__(status_code, detail)
        self.status = status_code
        self.detail = detail
        self.reason = reason_phrase(status_code)

    def to_response_body(self) -> bytes:
        return json_encode({"error": {"status": self.status, "reason": self.reason, "detail": self.detail}})
