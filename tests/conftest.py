"""Shared test fixtures for cswebhook tests."""

from __future__ import annotations

import base64
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

import httpx
import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from cswebhook.protocol.crypto import canonicalize


@pytest.fixture(scope="session")
def private_key() -> rsa.RSAPrivateKey:
    """One RSA-2048 issuer key for the whole session (keygen is slow)."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def public_key_pem(private_key) -> str:
    """The issuer's public key as PKCS#1 PEM, as the key endpoint serves it."""
    return private_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.PKCS1,
    ).decode("ascii")


@pytest.fixture(scope="session")
def other_public_key_pem() -> str:
    """A public key that did not sign anything."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.PKCS1,
    ).decode("ascii")


@pytest.fixture()
def sign(private_key) -> Callable[[Mapping[str, Any]], str]:
    """Return a function producing the ``sig=...`` header for a body."""

    def _sign(body: Mapping[str, Any]) -> str:
        signature = private_key.sign(
            canonicalize(body),
            padding.PSS(
                mgf=padding.MGF1(hashes.SHA256()),
                salt_length=padding.PSS.MAX_LENGTH,
            ),
            hashes.SHA256(),
        )
        return "sig=" + base64.b64encode(signature).decode("ascii")

    return _sign


@pytest.fixture()
def fresh_event() -> dict[str, Any]:
    """A webhook body triggered just now."""
    now = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return {
        "module": "entry",
        "api_key": "blt0123456789abcdef",
        "event": "publish",
        "data": {"entry": {"uid": "blt42", "title": "Hello, wörld", "version": 3}},
        "triggered_at": now.replace("+00:00", "Z"),
    }


class KeyEndpoint:
    """Fake region endpoint recording every request it receives."""

    def __init__(self, pem: str, status_code: int = 200) -> None:
        self.pem = pem
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(
            self.status_code, json={"signing-key": self.pem, "kid": "test"}
        )

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture()
def key_endpoint(public_key_pem) -> KeyEndpoint:
    """Key endpoint serving the issuer's public key."""
    return KeyEndpoint(public_key_pem)


@pytest.fixture()
def make_key_endpoint() -> type[KeyEndpoint]:
    """Factory for endpoints serving some other key or status."""
    return KeyEndpoint
