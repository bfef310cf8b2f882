from __future__ import annotations

import logging

import pytest
from pythonjsonlogger import jsonlogger

from greenhub.logging_config import configure_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_is_the_default(root_logger, monkeypatch):
    monkeypatch.delenv("GREENHUB_LOG_FORMAT", raising=False)
    monkeypatch.delenv("GREENHUB_LOG_LEVEL", raising=False)

    handler = configure_logging()

    assert root_logger.handlers == [handler]
    assert isinstance(handler.formatter, jsonlogger.JsonFormatter)
    assert root_logger.level == logging.INFO


def test_env_selects_plain_format_and_level(root_logger, monkeypatch):
    monkeypatch.setenv("GREENHUB_LOG_FORMAT", "PLAIN")
    monkeypatch.setenv("GREENHUB_LOG_LEVEL", "debug")

    handler = configure_logging()

    assert not isinstance(handler.formatter, jsonlogger.JsonFormatter)
    assert root_logger.level == logging.DEBUG


def test_arguments_override_env(root_logger, monkeypatch):
    monkeypatch.setenv("GREENHUB_LOG_FORMAT", "plain")

    handler = configure_logging(level=logging.WARNING, force_format="json")

    assert isinstance(handler.formatter, jsonlogger.JsonFormatter)
    assert root_logger.level == logging.WARNING
