"""CLI tests using click.testing.CliRunner.

Network access is replaced by patching verify_sync with a wrapper that
injects a mock key-endpoint transport.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from cswebhook.cli.main import cli
from cswebhook.sdk.verifier import verify_sync


@pytest.fixture
def runner():
    """Click CliRunner for CLI testing."""
    return CliRunner()


@pytest.fixture
def offline_verify(key_endpoint):
    """Patch the CLI's verify_sync to talk to the mock key endpoint."""
    calls: list[dict] = []

    def _verify(header, body, options=None, **kwargs):
        calls.append({"header": header, "body": body, "options": options, **kwargs})
        return verify_sync(header, body, options, transport=key_endpoint.transport, **kwargs)

    with patch("cswebhook.cli.main.verify_sync", side_effect=_verify):
        yield calls


def _write_body(tmp_path: Path, body: dict) -> Path:
    path = tmp_path / "body.json"
    path.write_text(json.dumps(body, ensure_ascii=False), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# help / version
# ---------------------------------------------------------------------------


def test_cli_help(runner: CliRunner):
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    for cmd in ("verify", "regions"):
        assert cmd in result.output


def test_cli_version(runner: CliRunner):
    with patch("importlib.metadata.version", return_value="0.1.0"):
        result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


# ---------------------------------------------------------------------------
# regions
# ---------------------------------------------------------------------------


def test_regions_lists_all(runner: CliRunner):
    result = runner.invoke(cli, ["regions"])
    assert result.exit_code == 0
    assert "AZZURE-EU" in result.output
    assert "https://eu-app.contentstack.com/.well-known/public-keys.json" in result.output


# ---------------------------------------------------------------------------
# verify
# ---------------------------------------------------------------------------


class TestVerifyCommand:
    def test_verified(self, runner, tmp_path, sign, fresh_event, offline_verify):
        body_path = _write_body(tmp_path, fresh_event)
        result = runner.invoke(cli, ["verify", str(body_path), "-s", sign(fresh_event)])
        assert result.exit_code == 0, result.output
        assert "verified" in result.output
        assert offline_verify[0]["options"] == {}

    def test_body_from_stdin(self, runner, sign, fresh_event, offline_verify):
        result = runner.invoke(
            cli,
            ["verify", "-", "--signature", sign(fresh_event)],
            input=json.dumps(fresh_event, ensure_ascii=False),
        )
        assert result.exit_code == 0, result.output

    def test_only_passed_flags_become_options(self, runner, tmp_path, sign, fresh_event, offline_verify):
        body_path = _write_body(tmp_path, fresh_event)
        result = runner.invoke(
            cli,
            [
                "verify", str(body_path), "-s", sign(fresh_event),
                "--region", "EU", "--no-replay", "--timeout-ms", "2000",
            ],
        )
        assert result.exit_code == 0, result.output
        assert offline_verify[0]["options"] == {
            "region": "EU",
            "replay_verify": False,
            "request_timeout_ms": 2000,
        }

    def test_env_defaults_applied(self, runner, tmp_path, sign, offline_verify, monkeypatch):
        stale = {"event": "publish", "triggered_at": "2014-01-01T00:00:00Z"}
        body_path = _write_body(tmp_path, stale)
        monkeypatch.setenv("CS_WEBHOOK_REPLAY_VERIFY", "false")
        result = runner.invoke(cli, ["verify", str(body_path), "-s", sign(stale)])
        assert result.exit_code == 0, result.output
        assert offline_verify[0]["defaults"].replay_verify is False

    def test_rejected(self, runner, tmp_path, offline_verify):
        body_path = _write_body(tmp_path, {"triggered_at": "2024-01-01T00:00:00Z"})
        result = runner.invoke(cli, ["verify", str(body_path), "-s", "sig=YmFkc2lnbmF0dXJl"])
        assert result.exit_code == 1
        assert "Error [expired_event]" in result.output

    def test_invalid_json_body(self, runner, tmp_path):
        path = tmp_path / "body.json"
        path.write_text("{not json", encoding="utf-8")
        result = runner.invoke(cli, ["verify", str(path), "-s", "sig=abc"])
        assert result.exit_code == 1
        assert "not valid JSON" in result.output

    def test_unknown_region_rejected_by_click(self, runner, tmp_path):
        body_path = _write_body(tmp_path, {"triggered_at": "x"})
        result = runner.invoke(cli, ["verify", str(body_path), "-s", "sig=abc", "-r", "MARS"])
        assert result.exit_code == 2

    def test_signature_required(self, runner, tmp_path):
        body_path = _write_body(tmp_path, {"triggered_at": "x"})
        result = runner.invoke(cli, ["verify", str(body_path)])
        assert result.exit_code == 2
