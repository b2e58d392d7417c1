"""Pytest configuration for keycoach tests."""

import logging

import instrukt_ai_logging
import pytest


def _noop_configure_logging(*_args, **_kwargs):  # type: ignore[no-untyped-def]
    return None


instrukt_ai_logging.configure_logging = _noop_configure_logging  # type: ignore[assignment]
logging.getLogger("keycoach").handlers.clear()
logging.getLogger().handlers.clear()


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's KEYCOACH_* environment out of the tests."""
    monkeypatch.delenv("KEYCOACH_CONFIG", raising=False)
    monkeypatch.delenv("KEYCOACH_LOG_LEVEL", raising=False)


def pytest_collection_modifyitems(config, items):
    """Set per-marker timeouts: unit=1s, integration=5s."""
    for item in items:
        if "unit" in item.keywords:
            item.add_marker(pytest.mark.timeout(1))
        elif "integration" in item.keywords:
            item.add_marker(pytest.mark.timeout(5))
