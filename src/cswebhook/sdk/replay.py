"""Replay-window enforcement on the event's ``triggered_at`` timestamp.

Only stale events are rejected.  An event stamped in the future relative
to the local clock passes, so modest issuer/receiver clock skew is
tolerated.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from cswebhook.protocol.errors import ErrorKind, VerificationError
from cswebhook.protocol.types import TRIGGERED_AT_FIELD
from cswebhook.sdk.config import VerificationConfig

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_triggered_at(value: Any) -> datetime:
    """Parse an ISO-8601 ``triggered_at`` value into an aware datetime.

    A trailing ``Z`` is accepted; a value without an offset is taken as UTC.

    Raises:
        VerificationError: ``MALFORMED_TIMESTAMP`` if the value is missing,
            not a string, or not a valid date/time.
    """
    if not value or not isinstance(value, str):
        raise VerificationError(
            ErrorKind.MALFORMED_TIMESTAMP,
            f"Invalid Payload: '{TRIGGERED_AT_FIELD}' is required and must be a string",
        )
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise VerificationError(
            ErrorKind.MALFORMED_TIMESTAMP, f"Invalid '{TRIGGERED_AT_FIELD}' format"
        ) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def verify_replay(
    request_body: Mapping[str, Any],
    config: VerificationConfig,
    now: Clock | None = None,
) -> None:
    """Reject the event if it is older than ``config.replay_threshold_ms``.

    No-op when ``config.replay_verify`` is false.

    Raises:
        VerificationError: ``MALFORMED_TIMESTAMP`` or ``EXPIRED_EVENT``.
    """
    if not config.replay_verify:
        logger.debug("Replay verification disabled")
        return

    triggered_at = parse_triggered_at(request_body.get(TRIGGERED_AT_FIELD))
    current = (now or _utc_now)()
    age_ms = (current - triggered_at).total_seconds() * 1000

    if age_ms > config.replay_threshold_ms:
        raise VerificationError(
            ErrorKind.EXPIRED_EVENT, "Expired signature: The webhook is too old"
        )
    logger.debug("Event age %.0f ms within %s ms window", age_ms, config.replay_threshold_ms)
