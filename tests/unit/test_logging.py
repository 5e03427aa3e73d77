"""Tests for hitek.core.logging."""

import logging

import pytest

from hitek.core.logging import configure_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    httpx_level = logging.getLogger("httpx").level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("httpx").setLevel(httpx_level)


def test_level_from_environment(root_logger, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")

    configure_logging()

    assert root_logger.level == logging.WARNING


def test_reconfigure_replaces_handlers(root_logger):
    configure_logging(level="INFO")
    configure_logging(level="DEBUG")

    assert root_logger.level == logging.DEBUG
    assert len([h for h in root_logger.handlers if isinstance(h, logging.StreamHandler)]) >= 1
    assert len(root_logger.handlers) <= 2


def test_http_client_chatter_is_quieted(root_logger):
    configure_logging(level="INFO")

    assert logging.getLogger("httpx").level == logging.WARNING
