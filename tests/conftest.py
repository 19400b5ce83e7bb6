"""pytest configuration and fixtures for lazycoro tests."""

import logging

import pytest

from lazycoro import Lazy, LazyConfig, set_config


@pytest.fixture(autouse=True)
def default_config(monkeypatch):
    """Isolate every test from LAZYCORO_* variables and earlier set_config() calls."""
    monkeypatch.delenv("LAZYCORO_TRACE", raising=False)
    monkeypatch.delenv("LAZYCORO_LOG_LEVEL", raising=False)
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def trace_config() -> LazyConfig:
    """Config with coroutine tracing enabled."""
    return LazyConfig(trace=True, log_level="DEBUG")


@pytest.fixture
def trace_log(caplog):
    """Capture DEBUG records from the coroutine adapter.

    Yields:
        Function returning the captured messages.
    """
    caplog.set_level(logging.DEBUG, logger="lazycoro.core.coroutine")

    def messages():
        return [r.getMessage() for r in caplog.records if r.name == "lazycoro.core.coroutine"]

    yield messages


@pytest.fixture
def pending_pair():
    """Two pending named futures: (a, b)."""
    return Lazy(name="a"), Lazy(name="b")
