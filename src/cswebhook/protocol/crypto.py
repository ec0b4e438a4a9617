"""Cryptographic primitives for webhook signature verification.

Wraps ``cryptography`` for PEM key loading and RSA-PSS/SHA-256
verification.  The issuer uses one fixed scheme; there is no algorithm
negotiation.

This module never hand-rolls crypto -- every operation delegates to
``cryptography``.
"""

from __future__ import annotations

import binascii
import json
import logging
import math
import re
from decimal import Decimal
from typing import Any, Mapping

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey

from cswebhook.protocol.errors import ErrorKind, VerificationError
from cswebhook.protocol.types import b64_decode_lenient

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Canonical JSON
# ---------------------------------------------------------------------------

# Largest integer a JS number holds exactly; larger ints are parsed as doubles.
_MAX_SAFE_INT = 2**53

# Unpaired UTF-16 surrogates, which the issuer escapes as ``\uXXXX``.
_LONE_SURROGATE = re.compile("[\ud800-\udfff]")


def _js_number(value: float) -> str:
    """Format *value* the way the issuer's ``Number#toString`` does."""
    if not math.isfinite(value):
        return "null"
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(map(str, digit_tuple)).rstrip("0")
    exponent += len(digit_tuple) - len(digits)
    k = len(digits)
    # value == 0.<digits> * 10**n
    n = exponent + k

    if k <= n <= 21:
        return sign + digits + "0" * (n - k)
    if 0 < n <= 21:
        return sign + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return sign + "0." + "0" * -n + digits
    e = n - 1
    mantissa = digits if k == 1 else digits[0] + "." + digits[1:]
    return f"{sign}{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"


def _js_string(value: str) -> str:
    # Join surrogate pairs into code points; leftovers are unpaired.
    value = value.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")
    out = json.dumps(value, ensure_ascii=False)
    return _LONE_SURROGATE.sub(lambda m: f"\\u{ord(m.group()):04x}", out)


def _dump(value: Any) -> str:
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return _js_string(value)
    if isinstance(value, int):
        if abs(value) > _MAX_SAFE_INT:
            return _js_number(float(value))
        return str(value)
    if isinstance(value, float):
        return _js_number(value)
    if isinstance(value, Mapping):
        items = ",".join(
            f"{_js_string(str(k))}:{_dump(v)}" for k, v in value.items()
        )
        return "{" + items + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_dump(v) for v in value) + "]"
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def canonicalize(body: Mapping[str, Any]) -> bytes:
    """Produce the exact bytes the issuer signed for *body*.

    Mirrors the issuer's ``JSON.stringify``:

    - Keeps key insertion order (the order the body was parsed in).
    - Uses compact separators.
    - Leaves non-ASCII characters unescaped, UTF-8 encoded; unpaired
      surrogates are written as lowercase ``\\uXXXX`` escapes.
    - Prints numbers in JS notation: ``1.0`` -> ``1``, ``0.00005`` stays
      plain, ``1.5e-7`` and ``1e+21`` use an unpadded signed exponent,
      non-finite values become ``null``.
    """
    return _dump(body).encode("utf-8")


# ---------------------------------------------------------------------------
# Header and key parsing
# ---------------------------------------------------------------------------

def extract_signature(header_signature: str) -> str:
    """Pull the base64 token out of a ``sig=<base64>[,...]`` header.

    Only the first comma-separated attribute is read.  Returns ``""`` when
    the attribute has no ``=`` so that the caller fails verification
    instead of raising a parse error.
    """
    first = header_signature.split(",")[0]
    parts = first.split("=")
    return parts[1] if len(parts) > 1 else ""


def load_public_key(public_key_pem: str) -> RSAPublicKey:
    """Load a PEM-encoded RSA public key.

    Accepts PKCS#1 (``BEGIN RSA PUBLIC KEY``) and SubjectPublicKeyInfo
    (``BEGIN PUBLIC KEY``) encodings.

    Raises:
        VerificationError: ``KEY_PARSE_FAILURE`` if the key is missing,
            malformed, or not an RSA key.
    """
    if not public_key_pem or not isinstance(public_key_pem, str):
        raise VerificationError(
            ErrorKind.KEY_PARSE_FAILURE, "Signing key is missing or empty"
        )
    try:
        key = serialization.load_pem_public_key(public_key_pem.encode("utf-8"))
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise VerificationError(
            ErrorKind.KEY_PARSE_FAILURE, f"Invalid signing key: {exc}"
        ) from exc
    if not isinstance(key, RSAPublicKey):
        raise VerificationError(
            ErrorKind.KEY_PARSE_FAILURE,
            f"Invalid signing key: expected RSA, got {type(key).__name__}",
        )
    return key


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------

def verify_signature(
    header_signature: str,
    public_key_pem: str,
    body: Mapping[str, Any],
) -> None:
    """Verify the RSA-PSS/SHA-256 signature of *body*.

    Raises:
        VerificationError: ``KEY_PARSE_FAILURE`` if the key cannot be
            loaded, ``SIGNATURE_MISMATCH`` if the signature is invalid.
    """
    token = extract_signature(header_signature)
    public_key = load_public_key(public_key_pem)

    try:
        sig_bytes = b64_decode_lenient(token)
    except binascii.Error:
        logger.debug("Undecodable signature token, treating as empty")
        sig_bytes = b""

    if not sig_bytes:
        raise VerificationError(
            ErrorKind.SIGNATURE_MISMATCH, "Signature verification failed."
        )

    try:
        public_key.verify(
            sig_bytes,
            canonicalize(body),
            padding.PSS(
                mgf=padding.MGF1(hashes.SHA256()),
                salt_length=padding.PSS.AUTO,
            ),
            hashes.SHA256(),
        )
    except InvalidSignature as exc:
        raise VerificationError(
            ErrorKind.SIGNATURE_MISMATCH, "Signature verification failed."
        ) from exc
