"""Tests for app logging setup."""
import logging

import pytest

from noteflow.logging_config import NOISY_LOGGERS, resolve_level, setup_logging


@pytest.mark.parametrize("name, expected", [
    ("debug", logging.DEBUG),
    (" WARNING ", logging.WARNING),
    ("chatty", logging.INFO),
])
def test_resolve_level_by_name(name, expected):
    assert resolve_level(name) == expected


def test_level_comes_from_environment(monkeypatch):
    monkeypatch.setenv("NOTEFLOW_LOG_LEVEL", "error")
    assert resolve_level() == logging.ERROR

    monkeypatch.delenv("NOTEFLOW_LOG_LEVEL")
    assert resolve_level() == logging.INFO


def test_http_client_loggers_are_quietened():
    previous = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}
    try:
        assert setup_logging("DEBUG") == logging.DEBUG
        assert all(logging.getLogger(name).level == logging.WARNING for name in NOISY_LOGGERS)
    finally:
        for name, level in previous.items():
            logging.getLogger(name).setLevel(level)
