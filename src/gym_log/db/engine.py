"""Database engine setup, schema migrations and the shared connection."""

import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable

import aiosqlite

from ..config import get_settings
from ..models.exercises import MeasurementType
from .errors import DatabaseInitError, MigrationError, MissingRowIdError
from .models import CREATE_INDEXES, CREATE_TABLES

logger = logging.getLogger(__name__)

DB_NAME = "gym_log"
DB_VERSION = 1

# app_state keys
ACTIVE_SESSION_KEY = "active_session_id"
SEED_FLAG_KEY = "seed_exercises_v1"
SCHEMA_VERSION_KEY = "schema_version"

# Opened once per process, see init_db() / close_db()
_connection: aiosqlite.Connection | None = None
_connection_path: Path | None = None


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    settings = get_settings()
    if data_dir is None:
        data_dir = settings.data_dir
    data_dir = Path(data_dir).expanduser()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / settings.db_filename


def now_ms() -> int:
    """Current time as epoch milliseconds (the stored timestamp format)."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Migration:
    """One additive schema step, applied when the store is older than ``version``."""

    version: int
    description: str
    apply: Callable[[aiosqlite.Connection], Awaitable[None]]


def is_already_applied(error: Exception) -> bool:
    """Whether a failed ALTER means the change is already in place."""
    message = str(error).lower()
    return "duplicate" in message or "already exists" in message


async def table_columns(db: aiosqlite.Connection, table: str) -> set[str]:
    cursor = await db.execute(f"PRAGMA table_info({table})")
    columns = await cursor.fetchall()
    return {col[1] for col in columns}


def add_column(
    table: str, column: str, definition: str
) -> Callable[[aiosqlite.Connection], Awaitable[None]]:
    """Build an idempotent ``ALTER TABLE ... ADD COLUMN`` step."""

    async def apply(db: aiosqlite.Connection) -> None:
        if column in await table_columns(db, table):
            logger.info("Column %s.%s already present", table, column)
            return
        try:
            await db.execute(f"ALTER TABLE {table} ADD COLUMN {column} {definition}")
        except aiosqlite.OperationalError as e:
            if not is_already_applied(e):
                raise
            logger.info("Column %s.%s already present (%s)", table, column, e)

    return apply


# Append-only. Never reorder, remove or repurpose a shipped step.
MIGRATIONS: tuple[Migration, ...] = (
    Migration(
        1,
        "add exercises.measurement_type",
        add_column("exercises", "measurement_type", "TEXT NOT NULL DEFAULT 'weight_reps'"),
    ),
    Migration(
        2,
        "add session_exercises.position",
        add_column("session_exercises", "position", "INTEGER NOT NULL DEFAULT 0"),
    ),
    Migration(3, "add sets.weight_unit", add_column("sets", "weight_unit", "TEXT NULL")),
    Migration(4, "add sets.duration_sec", add_column("sets", "duration_sec", "INTEGER NULL")),
    Migration(5, "add sets.distance_m", add_column("sets", "distance_m", "REAL NULL")),
    Migration(
        6,
        "add sets.assisted",
        add_column("sets", "assisted", "INTEGER NOT NULL DEFAULT 0"),
    ),
    Migration(
        7,
        "add session_exercises.last_set_position",
        add_column("session_exercises", "last_set_position", "INTEGER NOT NULL DEFAULT 0"),
    ),
)

SCHEMA_VERSION = MIGRATIONS[-1].version

# Catalog entries whose measurement type is known to differ from the default.
# Only applied while the row still has the default (or no) type.
SEMANTIC_CORRECTIONS: tuple[tuple[str, MeasurementType], ...] = (
    ("Bike", MeasurementType.TIME_ONLY),
)


async def read_state(db: aiosqlite.Connection, key: str) -> str | None:
    cursor = await db.execute("SELECT value FROM app_state WHERE key = ?", (key,))
    row = await cursor.fetchone()
    return row[0] if row is not None else None


async def write_state(db: aiosqlite.Connection, key: str, value: str) -> None:
    await db.execute(
        "INSERT OR REPLACE INTO app_state (key, value) VALUES (?, ?)",
        (key, value),
    )


async def get_schema_version(db: aiosqlite.Connection) -> int:
    """Schema version recorded in app_state (0 for stores that predate it)."""
    value = await read_state(db, SCHEMA_VERSION_KEY)
    return int(value) if value else 0


async def run_migrations(db: aiosqlite.Connection) -> int:
    """Apply every migration newer than the store's version.

    Returns:
        Number of migrations applied

    Raises:
        MigrationError: If a step fails for any reason other than the change
            already being present
    """
    current = await get_schema_version(db)
    applied = 0

    for migration in MIGRATIONS:
        if migration.version <= current:
            continue
        try:
            await migration.apply(db)
        except aiosqlite.Error as e:
            logger.error(
                "Migration %d (%s) failed: %s", migration.version, migration.description, e
            )
            raise MigrationError(migration.version, migration.description, e) from e

        await write_state(db, SCHEMA_VERSION_KEY, str(migration.version))
        await db.commit()
        applied += 1
        logger.info("Migration %d applied: %s", migration.version, migration.description)

    return applied


async def apply_semantic_corrections(db: aiosqlite.Connection) -> int:
    """Reclassify known catalog entries. Safe to run on every start."""
    changed = 0
    for name, measurement_type in SEMANTIC_CORRECTIONS:
        cursor = await db.execute(
            """
            UPDATE exercises
            SET measurement_type = ?
            WHERE name = ?
              AND (measurement_type IS NULL OR measurement_type = ?)
            """,
            (measurement_type.value, name, MeasurementType.WEIGHT_REPS.value),
        )
        if cursor.rowcount:
            logger.info("Reclassified %s as %s", name, measurement_type.value)
            changed += cursor.rowcount
    await db.commit()
    return changed


async def _create_schema(db: aiosqlite.Connection) -> None:
    for statement in CREATE_TABLES:
        await db.execute(statement)
    await db.commit()

    await run_migrations(db)

    for statement in CREATE_INDEXES:
        await db.execute(statement)
    await db.commit()

    await apply_semantic_corrections(db)


async def init_db(db_path: Path | str | None = None) -> aiosqlite.Connection:
    """Open the process-wide connection and bring the schema up to date.

    Subsequent calls return the cached connection without doing any work.

    Raises:
        DatabaseInitError: If the database cannot be opened
        MigrationError: If a schema migration fails
    """
    global _connection, _connection_path

    if _connection is not None:
        return _connection

    if db_path is None:
        db_path = get_db_path()

    try:
        db = await aiosqlite.connect(db_path)
    except (aiosqlite.Error, OSError) as e:
        logger.error("Could not open database at %s: %s", db_path, e)
        raise DatabaseInitError(f"Could not open database at {db_path}: {e}") from e

    try:
        db.row_factory = aiosqlite.Row
        await db.execute("PRAGMA foreign_keys = ON")
        await _create_schema(db)
    except Exception:
        await db.close()
        raise

    _connection = db
    _connection_path = Path(db_path)
    logger.info("Database ready at %s (schema v%d)", db_path, SCHEMA_VERSION)
    return db


async def get_connection(db_path: Path | str | None = None) -> aiosqlite.Connection:
    """Return the shared connection, opening it on first use."""
    if _connection is None:
        return await init_db(db_path)
    return _connection


def get_connection_path() -> Path | None:
    """Path of the open database, or None when no connection is open."""
    return _connection_path


async def close_db() -> None:
    """Close the shared connection (process teardown and tests)."""
    global _connection, _connection_path

    if _connection is None:
        return
    db = _connection
    _connection = None
    _connection_path = None
    await db.close()


async def insert_returning_id(
    db: aiosqlite.Connection, sql: str, params: tuple
) -> int:
    """Execute an INSERT and return the generated row id.

    Falls back to ``last_insert_rowid()`` when the cursor does not report it.

    Raises:
        MissingRowIdError: If neither source yields an id
    """
    cursor = await db.execute(sql, params)
    row_id = cursor.lastrowid

    if not row_id:
        cursor = await db.execute("SELECT last_insert_rowid()")
        row = await cursor.fetchone()
        row_id = row[0] if row is not None else None

    if not row_id:
        raise MissingRowIdError("Insert succeeded but its row id could not be determined")
    return row_id


@asynccontextmanager
async def transaction(db: aiosqlite.Connection) -> AsyncIterator[aiosqlite.Connection]:
    """Run a write atomically; a failed statement rolls back the whole block."""
    await db.execute("BEGIN IMMEDIATE")
    try:
        yield db
    except BaseException:
        await db.rollback()
        raise
    await db.commit()
