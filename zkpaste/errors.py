"""
Error taxonomy for paste creation.

    InvalidOptions   nothing to paste, bad URL or option value     (never retried)
    EncryptionError  randomness, KDF or AEAD failure               (fatal)
    TransportError   connection failure, timeout, DNS              (retried)
    ApiError         server-reported failure or empty error body   (retried only if transient)
    InvalidResponse  unparseable body or missing fields            (never retried)

Every error keeps its structured fields so callers can branch on them;
str(error) is the human-readable summary.
"""

from __future__ import annotations


class PasteError(Exception):
    """Base class for all paste creation errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def details(self) -> list[str]:
        """Extra lines to print beneath the summary."""
        return []


class InvalidOptions(PasteError):
    """Caller supplied nothing to paste, or an invalid option."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class EncryptionError(PasteError):
    """Local cryptographic failure. Never retried."""


class TransportError(PasteError):
    """The request never produced an HTTP response."""

    def __init__(self, message: str, url: str | None = None, attempts: int = 0) -> None:
        super().__init__(message)
        self.url = url
        self.attempts = attempts


class ApiError(PasteError):
    """The server rejected the paste or answered a failing status with no body.

    Attributes:
        status: HTTP status code of the response, if any.
        errors: Discrete error strings extracted from the server message.
        body: Raw response body.
        transient: True when the failure is a bare 500/502/503 that may
            succeed on retry.
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        errors: list[str] | tuple[str, ...] = (),
        body: str | None = None,
        transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.errors = list(errors)
        self.body = body
        self.transient = transient

    def details(self) -> list[str]:
        return list(self.errors)


class InvalidResponse(PasteError):
    """The response body was not JSON or lacked a required field."""

    def __init__(self, message: str, body: str | None = None, field: str | None = None) -> None:
        super().__init__(message)
        self.body = body
        self.field = field

    def details(self) -> list[str]:
        if self.body is None:
            return []
        return [f"Response body: {self.body}"]
