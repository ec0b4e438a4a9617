"""Signing-key retrieval from the platform's region endpoints.

One HTTPS GET per verification call; no caching and no retry.  The
configured timeout is enforced as a hard deadline: when it elapses the
in-flight request task is cancelled and the client is closed, so the
socket does not outlive the call.
"""

from __future__ import annotations

import asyncio
import json
import logging

import httpx

from cswebhook.protocol.errors import ErrorKind, VerificationError
from cswebhook.protocol.types import CS_REGIONS_URLS, SIGNING_KEY_FIELD
from cswebhook.sdk.config import VerificationConfig

logger = logging.getLogger(__name__)


def resolve_key_url(config: VerificationConfig) -> str:
    """Return the key endpoint for *config*.

    ``custom_region_url`` wins over the region table.

    Raises:
        VerificationError: ``INVALID_CONFIG`` if no URL can be derived.
    """
    if config.custom_region_url:
        return config.custom_region_url
    url = CS_REGIONS_URLS.get(config.region)
    if not url:
        raise VerificationError(ErrorKind.INVALID_CONFIG, "Invalid region")
    return url


async def _get_json(
    url: str,
    timeout: float,
    transport: httpx.AsyncBaseTransport | None,
) -> dict:
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        try:
            resp = await client.get(url)
        except httpx.TimeoutException as exc:
            raise VerificationError(
                ErrorKind.TIMEOUT,
                f"Request to {url} timed out after {timeout * 1000:g} ms",
            ) from exc
        except httpx.TransportError as exc:
            raise VerificationError(
                ErrorKind.NETWORK_FAILURE, f"Network error for {url}: {exc}"
            ) from exc

    if resp.status_code is None or not 200 <= resp.status_code < 300:
        raise VerificationError.http_status(resp.status_code)

    try:
        data = json.loads(resp.content)
    except (ValueError, UnicodeDecodeError) as exc:
        raise VerificationError(
            ErrorKind.RESPONSE_PARSE_FAILURE, f"Error parsing JSON from {url}: {exc}"
        ) from exc
    if not isinstance(data, dict):
        raise VerificationError(
            ErrorKind.RESPONSE_PARSE_FAILURE,
            f"Error parsing JSON from {url}: expected an object, got {type(data).__name__}",
        )
    return data


async def fetch_signing_key(
    config: VerificationConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Fetch the current PEM signing key for *config*.

    Returns ``""`` when the response has no usable ``signing-key`` field;
    the verifier rejects that as an unparseable key.

    Raises:
        VerificationError: ``TIMEOUT``, ``NETWORK_FAILURE``, ``HTTP_STATUS``
            or ``RESPONSE_PARSE_FAILURE``.
    """
    url = resolve_key_url(config)
    timeout = config.request_timeout
    logger.debug("Fetching signing key from %s (timeout %ss)", url, timeout)

    try:
        data = await asyncio.wait_for(_get_json(url, timeout, transport), timeout)
    except asyncio.TimeoutError as exc:
        raise VerificationError(
            ErrorKind.TIMEOUT,
            f"Request to {url} timed out after {config.request_timeout_ms:g} ms",
        ) from exc

    key = data.get(SIGNING_KEY_FIELD)
    if not isinstance(key, str):
        logger.debug("Response from %s has no '%s' string", url, SIGNING_KEY_FIELD)
        return ""
    return key
