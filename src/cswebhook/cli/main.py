"""cswebhook CLI -- verify captured webhook deliveries from the shell.

Thin wrapper around the Python SDK using click.
All commands use the sync wrapper (verify_sync).
"""

from __future__ import annotations

import json
import logging
import os
from typing import IO, Any

import click

from cswebhook.protocol import CS_REGIONS, CS_REGIONS_URLS, VerificationError
from cswebhook.sdk.config import config_from_env
from cswebhook.sdk.verifier import verify_sync


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error(msg: str) -> None:
    """Print an error message to stderr and exit 1."""
    click.echo(msg, err=True)
    raise SystemExit(1)


def _build_options(
    region: str | None,
    custom_region_url: str | None,
    replay: bool | None,
    replay_threshold_ms: int | None,
    timeout_ms: int | None,
) -> dict[str, Any]:
    """Collect only the flags the user actually passed."""
    options: dict[str, Any] = {}
    if region is not None:
        options["region"] = region
    if custom_region_url is not None:
        options["custom_region_url"] = custom_region_url
    if replay is not None:
        options["replay_verify"] = replay
    if replay_threshold_ms is not None:
        options["replay_threshold_ms"] = replay_threshold_ms
    if timeout_ms is not None:
        options["request_timeout_ms"] = timeout_ms
    return options


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="cswebhook")
@click.option(
    "--log-level",
    default=lambda: os.getenv("CS_WEBHOOK_LOG_LEVEL", "WARNING"),
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (default: $CS_WEBHOOK_LOG_LEVEL or WARNING).",
)
def cli(log_level: str) -> None:
    """cswebhook -- Contentstack webhook verification CLI."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# cswebhook verify
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("body_file", type=click.File("r", encoding="utf-8"))
@click.option("--signature", "-s", required=True, help="Signature header value (sig=...).")
@click.option(
    "--region", "-r", default=None, type=click.Choice(CS_REGIONS), help="Deployment region."
)
@click.option("--custom-region-url", default=None, help="Explicit signing-key URL.")
@click.option(
    "--replay/--no-replay", default=None, help="Enable or disable the replay-window check."
)
@click.option("--replay-threshold-ms", type=int, default=None, help="Maximum event age.")
@click.option("--timeout-ms", type=int, default=None, help="Key request timeout.")
def verify(
    body_file: IO[str],
    signature: str,
    region: str | None,
    custom_region_url: str | None,
    replay: bool | None,
    replay_threshold_ms: int | None,
    timeout_ms: int | None,
) -> None:
    """Verify a webhook body (BODY_FILE, or - for stdin) against its signature."""
    try:
        body = json.loads(body_file.read())
    except ValueError as exc:
        _error(f"Error: body is not valid JSON: {exc}")

    try:
        defaults = config_from_env()
        options = _build_options(
            region, custom_region_url, replay, replay_threshold_ms, timeout_ms
        )
        verify_sync(signature, body, options, defaults=defaults)
    except VerificationError as exc:
        _error(f"Error [{exc.kind.value}]: {exc.message}")

    click.echo("verified")


# ---------------------------------------------------------------------------
# cswebhook regions
# ---------------------------------------------------------------------------


@cli.command()
def regions() -> None:
    """List supported regions and their signing-key endpoints."""
    click.echo(f"{'REGION':<12} {'KEY URL'}")
    for code in CS_REGIONS:
        click.echo(f"{code:<12} {CS_REGIONS_URLS[code]}")


if __name__ == "__main__":
    cli()
