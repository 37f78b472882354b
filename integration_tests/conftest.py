"""Pytest configuration for integration tests."""

import pytest

from gym_log.config import get_settings


def pytest_collection_modifyitems(items):
    """Mark every test collected from this directory as an integration test."""
    for item in items:
        if "integration_tests" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def store_dir(tmp_path, monkeypatch):
    """A data directory the whole scenario reads and writes through."""
    path = tmp_path / "gym_log"
    monkeypatch.setenv("GYM_LOG_DATA_DIR", str(path))
    monkeypatch.delenv("GYM_LOG_SEED_FILE", raising=False)
    get_settings.cache_clear()
    yield path
    get_settings.cache_clear()
