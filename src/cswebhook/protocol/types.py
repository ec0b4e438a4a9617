"""Core types, constants, and utility functions for webhook verification."""

from __future__ import annotations

import base64
import binascii
import string
from typing import Any, Mapping, TypedDict


# Supported deployment regions, in the platform's own spelling.
# The first entry is the default region.
CS_REGIONS: tuple[str, ...] = (
    "NA",
    "EU",
    "AU",
    "AZZURE-NA",
    "AZZURE-EU",
    "GCP-NA",
    "GCP-EU",
)

# Region -> endpoint publishing the current signing key.
CS_REGIONS_URLS: Mapping[str, str] = {
    "NA": "https://app.contentstack.com/.well-known/public-keys.json",
    "EU": "https://eu-app.contentstack.com/.well-known/public-keys.json",
    "AU": "https://au-app.contentstack.com/.well-known/public-keys.json",
    "AZZURE-NA": "https://azure-na-app.contentstack.com/.well-known/public-keys.json",
    "AZZURE-EU": "https://azure-eu-app.contentstack.com/.well-known/public-keys.json",
    "GCP-NA": "https://gcp-na-app.contentstack.com/.well-known/public-keys.json",
    "GCP-EU": "https://gcp-eu-app.contentstack.com/.well-known/public-keys.json",
}

# Wire name of the event timestamp field.
TRIGGERED_AT_FIELD = "triggered_at"

# Wire name of the key field in the key endpoint's response.
SIGNING_KEY_FIELD = "signing-key"


# A parsed webhook body.  Only ``triggered_at`` is read by the verifier;
# every other field is opaque signed payload.
WebhookEvent = Mapping[str, Any]

# JSON document served by a region endpoint.
SigningKeyResponse = TypedDict(
    "SigningKeyResponse", {"signing-key": str}, total=False
)


_B64_ALPHABET = frozenset(string.ascii_letters + string.digits + "+/")


def b64_decode_lenient(s: str) -> bytes:
    """Standard base64 decode *s*, tolerating sloppy input.

    Characters outside the base64 alphabet are dropped, URL-safe ``-``/``_``
    are accepted, and missing padding is restored.  Raises
    ``binascii.Error`` only when what remains cannot be decoded at all.
    """
    s = s.replace("-", "+").replace("_", "/")
    cleaned = "".join(ch for ch in s if ch in _B64_ALPHABET)
    if len(cleaned) % 4 == 1:
        raise binascii.Error("Invalid base64 length")
    padding = 4 - len(cleaned) % 4
    if padding != 4:
        cleaned += "=" * padding
    return base64.b64decode(cleaned)
