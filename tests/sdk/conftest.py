"""Shared fixtures for cswebhook SDK tests."""

from __future__ import annotations

import logging

import pytest


@pytest.fixture(autouse=True)
def _sdk_debug_logging(caplog):
    """Capture SDK debug records so stage logging is exercised."""
    caplog.set_level(logging.DEBUG, logger="cswebhook")
