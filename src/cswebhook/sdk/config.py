"""Verification configuration via frozen dataclass (no pydantic -- instant construction)."""

from __future__ import annotations

import dataclasses
import logging
import math
import os
from dataclasses import dataclass
from typing import Any, Mapping

from cswebhook.protocol.errors import ErrorKind, VerificationError
from cswebhook.protocol.types import CS_REGIONS

logger = logging.getLogger(__name__)

# Caller-facing option names -> VerificationConfig field.  The camelCase
# spellings match the platform's own SDK options.
_OPTION_FIELDS: dict[str, str] = {
    "replay_verify": "replay_verify",
    "replayVerify": "replay_verify",
    "replay_threshold_ms": "replay_threshold_ms",
    "replayThreshold": "replay_threshold_ms",
    "replayThresholdMs": "replay_threshold_ms",
    "request_timeout_ms": "request_timeout_ms",
    "requestTimeout": "request_timeout_ms",
    "requestTimeoutMs": "request_timeout_ms",
    "region": "region",
    "custom_region_url": "custom_region_url",
    "customRegionUrl": "custom_region_url",
}

_ENV_PREFIX = "CS_WEBHOOK_"
_ENV_FIELDS: dict[str, str] = {
    "REPLAY_VERIFY": "replay_verify",
    "REPLAY_THRESHOLD_MS": "replay_threshold_ms",
    "REQUEST_TIMEOUT_MS": "request_timeout_ms",
    "REGION": "region",
    "CUSTOM_REGION_URL": "custom_region_url",
}

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class VerificationConfig:
    """Resolved settings for one verification call.

    ``custom_region_url``, when set, wins over the URL derived from
    ``region``.  Instances are immutable; use :func:`resolve_config` to
    overlay caller options onto a defaults value.
    """

    replay_verify: bool = True
    replay_threshold_ms: float = 5 * 60 * 1000
    request_timeout_ms: float = 30 * 1000
    region: str = CS_REGIONS[0]
    custom_region_url: str | None = None

    @property
    def request_timeout(self) -> float:
        """Request timeout in seconds."""
        return self.request_timeout_ms / 1000


DEFAULT_CONFIG = VerificationConfig()


def _is_positive_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def _check_field(field: str, name: str, value: Any) -> None:
    """Validate one caller-supplied option; *name* is the spelling used."""
    if field == "replay_verify":
        if not isinstance(value, bool):
            raise VerificationError.invalid_option(
                name, f"Invalid option '{name}': must be a boolean"
            )
    elif field in ("replay_threshold_ms", "request_timeout_ms"):
        if not _is_positive_number(value):
            raise VerificationError.invalid_option(
                name, f"Invalid option '{name}': must be a positive number"
            )
    elif field == "region":
        if value not in CS_REGIONS:
            raise VerificationError.invalid_option(
                name,
                f"Invalid option '{name}': {value!r} is not one of {list(CS_REGIONS)}",
            )
    elif field == "custom_region_url":
        # None means "unset", same as leaving the option out.
        if value is not None and (not isinstance(value, str) or not value):
            raise VerificationError.invalid_option(
                name, f"Invalid option '{name}': must be a non-empty string"
            )


def resolve_config(
    options: Mapping[str, Any] | None = None,
    defaults: VerificationConfig = DEFAULT_CONFIG,
) -> VerificationConfig:
    """Overlay caller *options* onto *defaults*.

    Only keys present in *options* are applied; every other field keeps
    its default.  Each present option is validated before the merge.

    Raises:
        VerificationError: ``INVALID_OPTION`` naming the first bad or
            unknown option, ``INVALID_CONFIG`` if *options* is not a mapping.
    """
    if options is None:
        return defaults
    if not isinstance(options, Mapping):
        raise VerificationError(
            ErrorKind.INVALID_CONFIG,
            f"Options must be a mapping, got {type(options).__name__}",
        )

    overrides: dict[str, Any] = {}
    for name, value in options.items():
        field = _OPTION_FIELDS.get(name)
        if field is None:
            raise VerificationError.invalid_option(
                name, f"Unknown option '{name}'"
            )
        _check_field(field, name, value)
        overrides[field] = value

    if not overrides:
        return defaults
    return dataclasses.replace(defaults, **overrides)


def validate_config(config: VerificationConfig) -> None:
    """Re-check a resolved config as a whole.

    Raises:
        VerificationError: ``INVALID_CONFIG`` describing the first problem.
    """
    if not isinstance(config, VerificationConfig):
        raise VerificationError(
            ErrorKind.INVALID_CONFIG,
            f"Invalid configuration object: {type(config).__name__}",
        )
    if not isinstance(config.replay_verify, bool):
        raise VerificationError(
            ErrorKind.INVALID_CONFIG, "Invalid configuration: replay_verify must be a boolean"
        )
    if not _is_positive_number(config.replay_threshold_ms):
        raise VerificationError(
            ErrorKind.INVALID_CONFIG,
            "Invalid configuration: replay_threshold_ms must be a positive number",
        )
    if not _is_positive_number(config.request_timeout_ms):
        raise VerificationError(
            ErrorKind.INVALID_CONFIG,
            "Invalid configuration: request_timeout_ms must be a positive number",
        )
    if config.custom_region_url is not None:
        if not isinstance(config.custom_region_url, str) or not config.custom_region_url:
            raise VerificationError(
                ErrorKind.INVALID_CONFIG,
                "Invalid configuration: custom_region_url must be a non-empty string",
            )
    elif config.region not in CS_REGIONS:
        raise VerificationError(ErrorKind.INVALID_CONFIG, "Invalid region")


def _parse_env_value(field: str, env_name: str, raw: str) -> Any:
    if field == "replay_verify":
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise VerificationError.invalid_option(
            env_name, f"Invalid option '{env_name}': must be a boolean"
        )
    if field in ("replay_threshold_ms", "request_timeout_ms"):
        try:
            return float(raw) if "." in raw else int(raw)
        except ValueError:
            raise VerificationError.invalid_option(
                env_name, f"Invalid option '{env_name}': must be a positive number"
            ) from None
    return raw


def config_from_env(
    environ: Mapping[str, str] | None = None,
    defaults: VerificationConfig = DEFAULT_CONFIG,
) -> VerificationConfig:
    """Build a defaults value from ``CS_WEBHOOK_*`` environment variables.

    Unset variables keep the value from *defaults*.  Set variables go
    through the same validation as caller options.
    """
    if environ is None:
        environ = os.environ

    resolved = defaults
    for suffix, field in _ENV_FIELDS.items():
        env_name = _ENV_PREFIX + suffix
        raw = environ.get(env_name)
        if raw is None or raw == "":
            continue
        value = _parse_env_value(field, env_name, raw)
        _check_field(field, env_name, value)
        resolved = dataclasses.replace(resolved, **{field: value})
        logger.debug("Config %s overridden from %s", field, env_name)
    return resolved
