"""Webhook verification error type.

Every rejection surfaces as :class:`VerificationError`.  The failure reason
is carried in :attr:`VerificationError.kind`, a closed :class:`ErrorKind`
enum, so receivers can branch on it without inspecting exception classes.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """All reasons a webhook can be rejected.

    Using ``str, Enum`` so that ``ErrorKind.TIMEOUT == "timeout"`` is True.
    """

    INVALID_HEADER = "invalid_header"
    INVALID_BODY = "invalid_body"
    INVALID_CONFIG = "invalid_config"
    INVALID_OPTION = "invalid_option"
    EXPIRED_EVENT = "expired_event"
    MALFORMED_TIMESTAMP = "malformed_timestamp"
    NETWORK_FAILURE = "network_failure"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    KEY_PARSE_FAILURE = "key_parse_failure"
    RESPONSE_PARSE_FAILURE = "response_parse_failure"
    SIGNATURE_MISMATCH = "signature_mismatch"
    UNEXPECTED = "unexpected"


class VerificationError(Exception):
    """Raised when a webhook fails verification.

    Attributes:
        kind: Why verification failed.
        message: Human-readable description.
        option: Offending option name (``INVALID_OPTION`` only).
        status_code: HTTP status of the key endpoint (``HTTP_STATUS`` only).
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        option: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.option = option
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"VerificationError({self.kind.value!r}, {self.message!r})"

    # Constructors, one per kind that carries a payload.

    @classmethod
    def invalid_option(cls, name: str, message: str) -> VerificationError:
        return cls(ErrorKind.INVALID_OPTION, message, option=name)

    @classmethod
    def http_status(cls, status_code: int | None) -> VerificationError:
        return cls(
            ErrorKind.HTTP_STATUS,
            f"HTTP error! Status: {status_code or 'Unknown'}",
            status_code=status_code,
        )
