"""Webhook verification pipeline.

Stages run strictly in order and the first failure ends the call::

    resolve_config -> validate_request -> verify_replay
        -> fetch_signing_key -> verify_signature

Usage::

    from cswebhook import verify, VerificationError

    try:
        await verify(request.headers["X-Contentstack-Request-Signature"], body)
    except VerificationError as exc:
        return reject(exc.kind, exc.message)
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from cswebhook.protocol.crypto import verify_signature
from cswebhook.protocol.errors import ErrorKind, VerificationError
from cswebhook.sdk._sync import _run_sync
from cswebhook.sdk.config import DEFAULT_CONFIG, VerificationConfig, resolve_config
from cswebhook.sdk.key_fetcher import fetch_signing_key
from cswebhook.sdk.replay import Clock, verify_replay
from cswebhook.sdk.validate import validate_request

logger = logging.getLogger(__name__)


async def _verify(
    header_signature: Any,
    request_body: Any,
    options: Mapping[str, Any] | None,
    defaults: VerificationConfig,
    transport: httpx.AsyncBaseTransport | None,
    now: Clock | None,
) -> None:
    config = resolve_config(options, defaults)
    validate_request(header_signature, request_body, config)
    verify_replay(request_body, config, now=now)
    public_key = await fetch_signing_key(config, transport=transport)
    verify_signature(header_signature, public_key, request_body)


async def verify(
    header_signature: str,
    request_body: Mapping[str, Any],
    options: Mapping[str, Any] | None = None,
    *,
    defaults: VerificationConfig = DEFAULT_CONFIG,
    transport: httpx.AsyncBaseTransport | None = None,
    now: Clock | None = None,
) -> bool:
    """Verify that a webhook was signed by the platform and is fresh.

    Args:
        header_signature: The signature header (``sig=<base64>[,...]``).
        request_body: The parsed JSON body, in wire field order.
        options: Partial overrides of *defaults*, e.g.
            ``{"region": "EU", "replay_threshold_ms": 60_000}``.
        defaults: Base configuration the options are overlaid onto.
        transport: Optional httpx transport for the key request.
        now: Optional clock for the replay check.

    Returns:
        ``True`` once every stage has passed.

    Raises:
        VerificationError: On any rejection; ``exc.kind`` says why.
    """
    try:
        await _verify(header_signature, request_body, options, defaults, transport, now)
    except VerificationError as exc:
        logger.warning("Webhook rejected [%s]: %s", exc.kind.value, exc.message)
        raise
    except Exception as exc:
        logger.exception("Unexpected error during webhook verification")
        raise VerificationError(ErrorKind.UNEXPECTED, str(exc)) from exc

    logger.debug("Webhook verified")
    return True


def verify_sync(
    header_signature: str,
    request_body: Mapping[str, Any],
    options: Mapping[str, Any] | None = None,
    *,
    defaults: VerificationConfig = DEFAULT_CONFIG,
    transport: httpx.AsyncBaseTransport | None = None,
    now: Clock | None = None,
) -> bool:
    """Synchronous :func:`verify` for non-async receivers.

    Blocks the calling thread, including a running event loop; async
    callers should ``await verify(...)`` instead.
    """
    return _run_sync(
        verify(
            header_signature,
            request_body,
            options,
            defaults=defaults,
            transport=transport,
            now=now,
        )
    )
