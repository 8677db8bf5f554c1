import logging

import pytest
from pythonjsonlogger import jsonlogger

from bi_browser.logging_config import configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_formatter_by_default(monkeypatch):
    monkeypatch.delenv("BI_BROWSER_LOG_FORMAT", raising=False)
    configure_logging()
    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0].formatter, jsonlogger.JsonFormatter)


def test_plain_formatter_from_env(monkeypatch):
    monkeypatch.setenv("BI_BROWSER_LOG_FORMAT", "plain")
    configure_logging(level=logging.DEBUG)
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert not isinstance(root.handlers[0].formatter, jsonlogger.JsonFormatter)


def test_force_format_wins(monkeypatch):
    monkeypatch.setenv("BI_BROWSER_LOG_FORMAT", "json")
    configure_logging(force_format="plain")
    assert not isinstance(logging.getLogger().handlers[0].formatter, jsonlogger.JsonFormatter)


def test_level_from_env_and_name(monkeypatch):
    monkeypatch.setenv("BI_BROWSER_LOG_LEVEL", "warning")
    configure_logging(force_format="plain")
    assert logging.getLogger().level == logging.WARNING

    configure_logging(level="debug", force_format="plain")
    assert logging.getLogger().level == logging.DEBUG

    monkeypatch.setenv("BI_BROWSER_LOG_LEVEL", "chatty")
    configure_logging(force_format="plain")
    assert logging.getLogger().level == logging.INFO
