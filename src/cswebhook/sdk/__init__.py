"""cswebhook SDK -- verification pipeline stages and entry points."""

from cswebhook.sdk.config import (
    DEFAULT_CONFIG,
    VerificationConfig,
    config_from_env,
    resolve_config,
    validate_config,
)
from cswebhook.sdk.key_fetcher import fetch_signing_key, resolve_key_url
from cswebhook.sdk.replay import parse_triggered_at, verify_replay
from cswebhook.sdk.validate import validate_request
from cswebhook.sdk.verifier import verify, verify_sync

__all__ = [
    "DEFAULT_CONFIG",
    "VerificationConfig",
    "config_from_env",
    "resolve_config",
    "validate_config",
    "fetch_signing_key",
    "resolve_key_url",
    "parse_triggered_at",
    "verify_replay",
    "validate_request",
    "verify",
    "verify_sync",
]
