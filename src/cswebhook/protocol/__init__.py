"""Webhook verification protocol layer.

Public API re-exports for ``cswebhook.protocol``.
"""

from cswebhook.protocol.types import (
    CS_REGIONS,
    CS_REGIONS_URLS,
    SIGNING_KEY_FIELD,
    TRIGGERED_AT_FIELD,
    SigningKeyResponse,
    WebhookEvent,
    b64_decode_lenient,
)

from cswebhook.protocol.errors import ErrorKind, VerificationError

from cswebhook.protocol.crypto import (
    canonicalize,
    extract_signature,
    load_public_key,
    verify_signature,
)

__all__ = [
    # Types
    "CS_REGIONS",
    "CS_REGIONS_URLS",
    "SIGNING_KEY_FIELD",
    "TRIGGERED_AT_FIELD",
    "SigningKeyResponse",
    "WebhookEvent",
    "b64_decode_lenient",
    # Errors
    "ErrorKind",
    "VerificationError",
    # Crypto
    "canonicalize",
    "extract_signature",
    "load_public_key",
    "verify_signature",
]
