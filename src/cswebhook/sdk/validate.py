"""Structural checks run before any network or crypto work."""

from __future__ import annotations

from typing import Any, Mapping

from cswebhook.protocol.errors import ErrorKind, VerificationError
from cswebhook.sdk.config import VerificationConfig, validate_config


def validate_request(
    header_signature: Any,
    request_body: Any,
    config: VerificationConfig,
) -> None:
    """Reject structurally invalid input early.

    Raises:
        VerificationError: ``INVALID_HEADER`` for a missing or non-string
            header, ``INVALID_BODY`` for a body that is not a mapping,
            ``INVALID_CONFIG`` for a malformed resolved config.
    """
    if not header_signature or not isinstance(header_signature, str):
        raise VerificationError(ErrorKind.INVALID_HEADER, "Invalid header signature")

    if request_body is None or not isinstance(request_body, Mapping):
        raise VerificationError(ErrorKind.INVALID_BODY, "Invalid request body")

    validate_config(config)
