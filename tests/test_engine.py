"""Tests for the storage engine: connection, migrations and corrections."""

import sqlite3

import aiosqlite
import pytest

from gym_log.db import engine
from gym_log.db.engine import (
    MIGRATIONS,
    SCHEMA_VERSION,
    Migration,
    apply_semantic_corrections,
    close_db,
    get_connection,
    get_schema_version,
    init_db,
    insert_returning_id,
    is_already_applied,
    table_columns,
)
from gym_log.db.errors import DatabaseInitError, MigrationError, MissingRowIdError
from gym_log.db.repositories import ExerciseRepository, SetRepository

LEGACY_SCHEMA = """
CREATE TABLE sessions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    date TEXT NOT NULL,
    focus TEXT NOT NULL,
    notes TEXT,
    status TEXT NOT NULL DEFAULT 'active',
    created_at INTEGER NOT NULL,
    finished_at INTEGER
);
CREATE TABLE app_state (key TEXT PRIMARY KEY, value TEXT);
CREATE TABLE exercises (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    created_at INTEGER NOT NULL
);
CREATE TABLE session_exercises (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id INTEGER NOT NULL,
    exercise_name TEXT NOT NULL,
    notes TEXT,
    created_at INTEGER NOT NULL,
    FOREIGN KEY (session_id) REFERENCES sessions(id) ON DELETE CASCADE
);
CREATE TABLE sets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_exercise_id INTEGER NOT NULL,
    position INTEGER NOT NULL,
    weight REAL,
    reps INTEGER,
    notes TEXT,
    created_at INTEGER NOT NULL,
    FOREIGN KEY (session_exercise_id) REFERENCES session_exercises(id) ON DELETE CASCADE
);
INSERT INTO exercises (name, created_at) VALUES ('Bike', 1), ('Deadlift', 1);
INSERT INTO sessions (date, focus, status, created_at) VALUES ('2024-01-02', 'legs', 'active', 5);
INSERT INTO session_exercises (session_id, exercise_name, created_at) VALUES (1, 'Deadlift', 6);
INSERT INTO sets (session_exercise_id, position, weight, reps, created_at) VALUES (1, 1, 140, 3, 7);
"""


@pytest.fixture
def legacy_db_path(tmp_path, data_dir):
    """A store in the shape written before any migration existed."""
    path = tmp_path / "legacy.db"
    conn = sqlite3.connect(path)
    conn.executescript(LEGACY_SCHEMA)
    conn.commit()
    conn.close()
    return path


class TestConnection:
    """Tests for the shared connection."""

    @pytest.mark.asyncio
    async def test_init_is_idempotent(self, db, temp_db_path):
        """A second init returns the cached handle."""
        assert await init_db(temp_db_path) is db
        assert await get_connection() is db
        assert engine.get_connection_path() == temp_db_path

    @pytest.mark.asyncio
    async def test_foreign_keys_enabled(self, db):
        cursor = await db.execute("PRAGMA foreign_keys")
        assert (await cursor.fetchone())[0] == 1

    @pytest.mark.asyncio
    async def test_close_and_reopen(self, temp_db_path, data_dir):
        first = await init_db(temp_db_path)
        await close_db()
        assert engine.get_connection_path() is None

        second = await init_db(temp_db_path)
        try:
            assert second is not first
            assert await get_schema_version(second) == SCHEMA_VERSION
        finally:
            await close_db()

    @pytest.mark.asyncio
    async def test_unopenable_path(self, tmp_path, data_dir):
        with pytest.raises(DatabaseInitError):
            await init_db(tmp_path / "missing" / "dir" / "x.db")
        assert engine.get_connection_path() is None


class TestMigrations:
    """Tests for versioned schema migrations."""

    @pytest.mark.asyncio
    async def test_fresh_store_is_current(self, db):
        assert await get_schema_version(db) == SCHEMA_VERSION
        assert SCHEMA_VERSION == len(MIGRATIONS)

    def test_versions_are_ordered(self):
        versions = [m.version for m in MIGRATIONS]
        assert versions == sorted(versions)
        assert len(set(versions)) == len(versions)

    @pytest.mark.asyncio
    async def test_legacy_store_is_upgraded(self, legacy_db_path):
        db = await init_db(legacy_db_path)
        try:
            assert "measurement_type" in await table_columns(db, "exercises")
            assert {"position", "last_set_position"} <= await table_columns(
                db, "session_exercises"
            )
            assert {"weight_unit", "duration_sec", "distance_m", "assisted"} <= (
                await table_columns(db, "sets")
            )
            assert await get_schema_version(db) == SCHEMA_VERSION

            cursor = await db.execute("SELECT assisted, weight_unit FROM sets WHERE id = 1")
            row = await cursor.fetchone()
            assert row["assisted"] == 0
            assert row["weight_unit"] is None

            repo = ExerciseRepository()
            assert (await repo.get_by_name("Bike")).measurement_type.value == "time_only"
            assert (await repo.get_by_name("Deadlift")).measurement_type.value == "weight_reps"
        finally:
            await close_db()

    @pytest.mark.asyncio
    async def test_legacy_sets_continue_numbering(self, legacy_db_path):
        """Rows without a high-water mark continue after the highest position."""
        await init_db(legacy_db_path)
        try:
            workout_set = await SetRepository().insert(1, weight=140, reps=3)
            assert workout_set.position == 2
        finally:
            await close_db()

    @pytest.mark.asyncio
    async def test_second_start_applies_nothing(self, legacy_db_path):
        db = await init_db(legacy_db_path)
        await close_db()

        db = await init_db(legacy_db_path)
        try:
            assert await engine.run_migrations(db) == 0
        finally:
            await close_db()

    @pytest.mark.asyncio
    async def test_failed_migration_is_fatal(self, temp_db_path, data_dir, monkeypatch):
        async def broken(db):
            await db.execute("ALTER TABLE no_such_table ADD COLUMN x INTEGER")

        monkeypatch.setattr(
            engine, "MIGRATIONS", (Migration(1, "touch a missing table", broken),)
        )

        with pytest.raises(MigrationError) as exc_info:
            await init_db(temp_db_path)

        assert exc_info.value.version == 1
        assert isinstance(exc_info.value.cause, aiosqlite.OperationalError)
        assert engine.get_connection_path() is None

    def test_duplicate_column_counts_as_applied(self):
        assert is_already_applied(sqlite3.OperationalError("duplicate column name: position"))
        assert is_already_applied(sqlite3.OperationalError("index foo already exists"))
        assert not is_already_applied(sqlite3.OperationalError("no such table: sets"))


class TestSemanticCorrections:
    """Tests for the Bike reclassification."""

    @pytest.mark.asyncio
    async def test_bike_reclassified(self, db):
        repo = ExerciseRepository()
        await repo.add("Bike")

        assert await apply_semantic_corrections(db) == 1
        assert await repo.get_measurement_type("Bike") == "time_only"

    @pytest.mark.asyncio
    async def test_user_choice_is_kept(self, db):
        """A Bike already classified by the user is not overwritten."""
        repo = ExerciseRepository()
        await repo.add("Bike")
        await repo.set_measurement_type("Bike", "cardio")

        assert await apply_semantic_corrections(db) == 0
        assert await repo.get_measurement_type("Bike") == "cardio"

    @pytest.mark.asyncio
    async def test_missing_bike_is_noop(self, db):
        assert await apply_semantic_corrections(db) == 0


class _NoRowIdCursor:
    lastrowid = None

    async def fetchone(self):
        return (0,)


class _NoRowIdConnection:
    async def execute(self, sql, params=()):
        return _NoRowIdCursor()


class TestInsertReturningId:
    """Tests for insert_returning_id."""

    @pytest.mark.asyncio
    async def test_returns_new_id(self, db):
        first = await insert_returning_id(
            db, "INSERT INTO exercises (name, created_at) VALUES (?, ?)", ("A", 1)
        )
        second = await insert_returning_id(
            db, "INSERT INTO exercises (name, created_at) VALUES (?, ?)", ("B", 1)
        )
        assert second == first + 1

    @pytest.mark.asyncio
    async def test_missing_id_raises(self):
        with pytest.raises(MissingRowIdError):
            await insert_returning_id(
                _NoRowIdConnection(), "INSERT INTO exercises (name) VALUES (?)", ("A",)
            )
