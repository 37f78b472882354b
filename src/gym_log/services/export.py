"""Faithful, deterministic dumps of the four tables (CSV and JSON).

Values are exported verbatim: timestamps stay epoch millis, weights keep
their recorded unit.
"""

import csv
import io
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from ..db.engine import (
    DB_NAME,
    DB_VERSION,
    apply_semantic_corrections,
    get_connection,
    transaction,
)
from ..db.models import (
    EXERCISES_COLUMNS,
    EXERCISES_COLUMNS_SCHEMA_AWARE,
    SESSION_EXERCISES_COLUMNS,
    SESSIONS_COLUMNS,
    SETS_COLUMNS,
)

logger = logging.getLogger(__name__)

EXPORT_FORMAT_VERSION = 1


@dataclass(frozen=True)
class ExportTable:
    """Column and sort order of one exported table."""

    name: str
    columns: tuple[str, ...]
    order_by: str


EXPORT_TABLES: tuple[ExportTable, ...] = (
    ExportTable("sessions", SESSIONS_COLUMNS, "created_at ASC, id ASC"),
    ExportTable("exercises", EXERCISES_COLUMNS, "name ASC, id ASC"),
    ExportTable(
        "session_exercises",
        SESSION_EXERCISES_COLUMNS,
        "session_id ASC, position ASC, created_at ASC, id ASC",
    ),
    ExportTable(
        "sets",
        SETS_COLUMNS,
        "session_exercise_id ASC, position ASC, created_at ASC, id ASC",
    ),
)


def columns_for(table: ExportTable, schema_aware: bool) -> tuple[str, ...]:
    if schema_aware and table.name == "exercises":
        return EXERCISES_COLUMNS_SCHEMA_AWARE
    return table.columns


async def export_tables(
    db_path: Path | None = None, schema_aware: bool = False
) -> dict[str, list[dict]]:
    """Read every table in its fixed column and sort order.

    Args:
        db_path: Optional database path
        schema_aware: Include ``exercises.measurement_type``
    """
    db = await get_connection(db_path)
    tables: dict[str, list[dict]] = {}

    for table in EXPORT_TABLES:
        columns = columns_for(table, schema_aware)
        cursor = await db.execute(
            f"SELECT {', '.join(columns)} FROM {table.name} ORDER BY {table.order_by}"
        )
        rows = await cursor.fetchall()
        tables[table.name] = [{col: row[col] for col in columns} for row in rows]

    return tables


def rows_to_csv(headers: list[str] | tuple[str, ...], rows: list[dict]) -> str:
    """Render rows as CSV. NULL becomes an empty field; quoting only when needed."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(headers)
    for row in rows:
        writer.writerow([row.get(h) for h in headers])
    return buffer.getvalue()


def build_export_document(
    tables: dict[str, list[dict]], exported_at: datetime | None = None
) -> dict:
    """Wrap table dumps with export metadata."""
    if exported_at is None:
        exported_at = datetime.now(timezone.utc)
    return {
        "export_format_version": EXPORT_FORMAT_VERSION,
        "exported_at": exported_at.isoformat(),
        "db_name": DB_NAME,
        "db_version": DB_VERSION,
        "tables": {table.name: tables.get(table.name, []) for table in EXPORT_TABLES},
    }


def export_stamp(moment: datetime | None = None) -> str:
    """Filename-safe timestamp, e.g. ``2026-01-01_162145``."""
    if moment is None:
        moment = datetime.now()
    return moment.strftime("%Y-%m-%d_%H%M%S")


async def write_export(
    out_dir: Path,
    db_path: Path | None = None,
    schema_aware: bool = False,
) -> Path:
    """Write one CSV per table plus ``export.json`` into a timestamped folder.

    Returns:
        The folder the files were written to
    """
    tables = await export_tables(db_path, schema_aware=schema_aware)

    folder = Path(out_dir) / export_stamp()
    folder.mkdir(parents=True, exist_ok=True)

    for table in EXPORT_TABLES:
        csv_text = rows_to_csv(columns_for(table, schema_aware), tables[table.name])
        (folder / f"{table.name}.csv").write_text(csv_text, encoding="utf-8")

    document = build_export_document(tables)
    (folder / "export.json").write_text(json.dumps(document, indent=2), encoding="utf-8")

    logger.info(
        "Export complete: %d sessions, %d exercises, %d session_exercises, %d sets -> %s",
        len(tables["sessions"]),
        len(tables["exercises"]),
        len(tables["session_exercises"]),
        len(tables["sets"]),
        folder,
    )
    return folder


async def restore_export(document: dict, db_path: Path | None = None) -> dict[str, int]:
    """Load an export document into a store that has no sessions yet.

    Rows keep their ids. The exercise catalog is replaced by the exported one.

    Returns:
        Row count restored per table

    Raises:
        ValueError: If the document format is unknown or the store already
            holds sessions
    """
    version = document.get("export_format_version")
    if version != EXPORT_FORMAT_VERSION:
        raise ValueError(f"Unsupported export format version: {version!r}")
    tables = document.get("tables") or {}

    db = await get_connection(db_path)
    cursor = await db.execute("SELECT COUNT(*) FROM sessions")
    if (await cursor.fetchone())[0]:
        raise ValueError("Cannot restore into a store that already has sessions")

    allowed = {
        "sessions": set(SESSIONS_COLUMNS),
        "exercises": set(EXERCISES_COLUMNS_SCHEMA_AWARE),
        "session_exercises": set(SESSION_EXERCISES_COLUMNS),
        "sets": set(SETS_COLUMNS),
    }
    counts: dict[str, int] = {}

    async with transaction(db):
        await db.execute("DELETE FROM exercises")

        # Parents before children
        for table in ("sessions", "exercises", "session_exercises", "sets"):
            rows = tables.get(table, [])
            for row in rows:
                columns = [col for col in row if col in allowed[table]]
                placeholders = ", ".join("?" for _ in columns)
                await db.execute(
                    f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
                    tuple(row[col] for col in columns),
                )
            counts[table] = len(rows)

        await db.execute(
            """
            UPDATE session_exercises SET last_set_position = COALESCE(
                (SELECT MAX(position) FROM sets
                 WHERE sets.session_exercise_id = session_exercises.id),
                0
            )
            """
        )

    await apply_semantic_corrections(db)
    logger.info("Restored export: %s", counts)
    return counts
