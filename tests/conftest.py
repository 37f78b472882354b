"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest
import pytest_asyncio

from gym_log.config import get_settings
from gym_log.db import close_db, init_db


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Point the settings at a temporary data directory."""
    path = tmp_path / "data"
    monkeypatch.setenv("GYM_LOG_DATA_DIR", str(path))
    monkeypatch.delenv("GYM_LOG_SEED_FILE", raising=False)
    get_settings.cache_clear()
    yield path
    get_settings.cache_clear()


@pytest.fixture
def temp_db_path(tmp_path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def db(temp_db_path, data_dir):
    """A fresh store, opened as the shared connection."""
    connection = await init_db(temp_db_path)
    yield connection
    await close_db()


@pytest.fixture
def seed_file(tmp_path) -> Path:
    """A small catalog file in the bundled format."""
    path = tmp_path / "seed.csv"
    path.write_text(
        "exercise_name\n"
        "Bench press\n"
        '"Lat pulldown"\n'
        "\n"
        "Bike\n"
        "Plank\n",
        encoding="utf-8",
    )
    return path
