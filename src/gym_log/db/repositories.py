"""Data access layer for gym-log."""

from pathlib import Path

import aiosqlite

from ..models.exercises import DEFAULT_MEASUREMENT_TYPE, Exercise, MeasurementType
from ..models.session import (
    Session,
    SessionStatus,
    normalize_focus,
    normalize_session_date,
)
from ..models.sets import SessionExercise, WorkoutSet, normalize_set_fields
from .engine import (
    ACTIVE_SESSION_KEY,
    SEED_FLAG_KEY,
    get_connection,
    insert_returning_id,
    now_ms,
    read_state,
    transaction,
    write_state,
)
from .models import SETS_COLUMNS


_SETS_SELECT = ", ".join(f"s.{col}" for col in SETS_COLUMNS)


class AppStateRepository:
    """Key/value store for process-wide durable flags."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path

    async def get(self, key: str) -> str | None:
        db = await get_connection(self.db_path)
        return await read_state(db, key)

    async def set(self, key: str, value: str) -> None:
        """Insert or replace ``key``."""
        db = await get_connection(self.db_path)
        async with transaction(db):
            await write_state(db, key, str(value))

    async def clear(self, key: str) -> None:
        """Delete ``key``; no-op when absent."""
        db = await get_connection(self.db_path)
        async with transaction(db):
            await db.execute("DELETE FROM app_state WHERE key = ?", (key,))

    async def get_active_session_id(self) -> int | None:
        value = await self.get(ACTIVE_SESSION_KEY)
        return int(value) if value else None

    async def set_active_session_id(self, session_id: int) -> None:
        await self.set(ACTIVE_SESSION_KEY, str(session_id))

    async def clear_active_session_id(self) -> None:
        await self.clear(ACTIVE_SESSION_KEY)

    async def is_seeded(self) -> bool:
        return await self.get(SEED_FLAG_KEY) == "1"

    async def mark_seeded(self) -> None:
        await self.set(SEED_FLAG_KEY, "1")


class ExerciseRepository:
    """Repository for the exercise catalog."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path

    async def list_all(self, limit: int = 500) -> list[Exercise]:
        """List catalog entries by name."""
        db = await get_connection(self.db_path)
        cursor = await db.execute(
            "SELECT * FROM exercises ORDER BY name ASC LIMIT ?", (limit,)
        )
        rows = await cursor.fetchall()
        return [self._row_to_exercise(row) for row in rows]

    async def search(self, query: str, limit: int = 120) -> list[Exercise]:
        """Case-insensitive substring search on the name."""
        query = query.strip()
        if not query:
            return await self.list_all(limit)

        db = await get_connection(self.db_path)
        cursor = await db.execute(
            """
            SELECT * FROM exercises
            WHERE instr(lower(name), lower(?)) > 0
            ORDER BY name ASC
            LIMIT ?
            """,
            (query, limit),
        )
        rows = await cursor.fetchall()
        return [self._row_to_exercise(row) for row in rows]

    async def get_by_name(self, name: str) -> Exercise | None:
        """Get an exercise by exact name."""
        db = await get_connection(self.db_path)
        cursor = await db.execute("SELECT * FROM exercises WHERE name = ?", (name,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_exercise(row)

    async def count(self) -> int:
        db = await get_connection(self.db_path)
        cursor = await db.execute("SELECT COUNT(*) FROM exercises")
        row = await cursor.fetchone()
        return row[0]

    async def add(
        self,
        name: str,
        measurement_type: MeasurementType = DEFAULT_MEASUREMENT_TYPE,
    ) -> int:
        """Add a new catalog entry.

        Raises:
            ValueError: If the name is blank
            aiosqlite.IntegrityError: If the name already exists
        """
        name = name.strip()
        if not name:
            raise ValueError("Exercise name cannot be blank")

        db = await get_connection(self.db_path)
        async with transaction(db):
            exercise_id = await insert_returning_id(
                db,
                "INSERT INTO exercises (name, measurement_type, created_at) VALUES (?, ?, ?)",
                (name, MeasurementType(measurement_type).value, now_ms()),
            )
        return exercise_id

    async def add_if_missing(self, name: str, created_at: int | None = None) -> bool:
        """Insert with the default measurement type unless the name exists.

        Does not commit; callers seeding in bulk commit once at the end.

        Returns:
            True if a row was inserted
        """
        db = await get_connection(self.db_path)
        cursor = await db.execute(
            "INSERT OR IGNORE INTO exercises (name, created_at) VALUES (?, ?)",
            (name, created_at if created_at is not None else now_ms()),
        )
        return cursor.rowcount > 0

    async def set_measurement_type(
        self, name: str, measurement_type: MeasurementType | str
    ) -> int:
        """Reclassify every entry named exactly ``name``.

        Returns:
            Number of rows updated (0 when the name is unknown)

        Raises:
            ValueError: If ``measurement_type`` is not a known type
        """
        measurement_type = MeasurementType(measurement_type)
        db = await get_connection(self.db_path)
        async with transaction(db):
            cursor = await db.execute(
                "UPDATE exercises SET measurement_type = ? WHERE name = ?",
                (measurement_type.value, name),
            )
        return cursor.rowcount

    async def get_measurement_type(self, name: str) -> MeasurementType:
        """Measurement type for a free-text name, weight_reps when unknown."""
        exercise = await self.get_by_name(name)
        if exercise is None:
            return DEFAULT_MEASUREMENT_TYPE
        return exercise.measurement_type

    def _row_to_exercise(self, row: aiosqlite.Row) -> Exercise:
        """Convert a database row to an Exercise."""
        return Exercise(
            id=row["id"],
            name=row["name"],
            measurement_type=MeasurementType.resolve(row["measurement_type"]),
            created_at=row["created_at"],
        )


class SessionRepository:
    """Repository for session rows. Lifecycle rules live in SessionService."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path

    async def create(
        self,
        date: str | None = None,
        focus: str | None = None,
        notes: str | None = None,
    ) -> int:
        """Insert an active session and return its id."""
        db = await get_connection(self.db_path)
        async with transaction(db):
            session_id = await insert_returning_id(
                db,
                """
                INSERT INTO sessions (date, focus, notes, status, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    normalize_session_date(date),
                    normalize_focus(focus),
                    notes if notes else None,
                    SessionStatus.ACTIVE.value,
                    now_ms(),
                ),
            )
        return session_id

    async def get(self, session_id: int) -> Session | None:
        """Get a session by ID."""
        db = await get_connection(self.db_path)
        cursor = await db.execute("SELECT * FROM sessions WHERE id = ?", (session_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_session(row)

    async def list_recent(self, limit: int = 20) -> list[Session]:
        """List sessions, newest first."""
        db = await get_connection(self.db_path)
        cursor = await db.execute(
            "SELECT * FROM sessions ORDER BY created_at DESC, id DESC LIMIT ?",
            (limit,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_session(row) for row in rows]

    async def mark_finished(self, session_id: int) -> bool:
        """Finish an active session. A finished session keeps its first stamp.

        Returns:
            True if the session transitioned from active to finished
        """
        db = await get_connection(self.db_path)
        async with transaction(db):
            cursor = await db.execute(
                """
                UPDATE sessions SET status = ?, finished_at = ?
                WHERE id = ? AND status = ?
                """,
                (
                    SessionStatus.FINISHED.value,
                    now_ms(),
                    session_id,
                    SessionStatus.ACTIVE.value,
                ),
            )
        return cursor.rowcount > 0

    async def delete(self, session_id: int) -> bool:
        """Delete a session; its exercises and sets cascade."""
        db = await get_connection(self.db_path)
        async with transaction(db):
            cursor = await db.execute("DELETE FROM sessions WHERE id = ?", (session_id,))
        return cursor.rowcount > 0

    def _row_to_session(self, row: aiosqlite.Row) -> Session:
        """Convert a database row to a Session."""
        return Session(
            id=row["id"],
            date=row["date"],
            focus=row["focus"],
            notes=row["notes"],
            status=SessionStatus(row["status"]),
            created_at=row["created_at"],
            finished_at=row["finished_at"],
        )


class SessionExerciseRepository:
    """Exercises attached to sessions, in display order."""

    ORDERINGS = {
        "recent": "se.created_at DESC, se.id DESC",
        "position": "se.position ASC, se.created_at ASC, se.id ASC",
    }

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path

    async def add(
        self,
        session_id: int,
        exercise_name: str,
        notes: str | None = None,
        position: int = 0,
    ) -> int:
        """Attach an exercise to a session.

        Raises:
            ValueError: If the name is blank after trimming
            aiosqlite.IntegrityError: If the session does not exist
        """
        name = str(exercise_name).strip()
        if not name:
            raise ValueError("Exercise name cannot be blank")
        notes = str(notes).strip() if notes else None

        db = await get_connection(self.db_path)
        async with transaction(db):
            session_exercise_id = await insert_returning_id(
                db,
                """
                INSERT INTO session_exercises
                (session_id, exercise_name, notes, position, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (session_id, name, notes or None, position, now_ms()),
            )
        return session_exercise_id

    async def get(self, session_exercise_id: int) -> SessionExercise | None:
        """Get one session exercise with its resolved measurement type."""
        db = await get_connection(self.db_path)
        cursor = await db.execute(
            """
            SELECT se.*, e.measurement_type
            FROM session_exercises se
            LEFT JOIN exercises e ON e.name = se.exercise_name
            WHERE se.id = ?
            """,
            (session_exercise_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_session_exercise(row)

    async def list_for_session(
        self, session_id: int, order: str = "recent"
    ) -> list[SessionExercise]:
        """List a session's exercises joined to the catalog by name.

        Args:
            session_id: Owning session
            order: ``recent`` (newest first) or ``position`` (template order)
        """
        if order not in self.ORDERINGS:
            raise ValueError(f"Unknown ordering {order!r}")

        db = await get_connection(self.db_path)
        cursor = await db.execute(
            f"""
            SELECT se.*, e.measurement_type
            FROM session_exercises se
            LEFT JOIN exercises e ON e.name = se.exercise_name
            WHERE se.session_id = ?
            ORDER BY {self.ORDERINGS[order]}
            """,
            (session_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_session_exercise(row) for row in rows]

    async def delete(self, session_exercise_id: int) -> bool:
        """Remove an exercise from its session; its sets cascade."""
        db = await get_connection(self.db_path)
        async with transaction(db):
            cursor = await db.execute(
                "DELETE FROM session_exercises WHERE id = ?", (session_exercise_id,)
            )
        return cursor.rowcount > 0

    def _row_to_session_exercise(self, row: aiosqlite.Row) -> SessionExercise:
        """Convert a joined row to a SessionExercise."""
        return SessionExercise(
            id=row["id"],
            session_id=row["session_id"],
            exercise_name=row["exercise_name"],
            notes=row["notes"],
            position=row["position"],
            created_at=row["created_at"],
            measurement_type=MeasurementType.resolve(row["measurement_type"]),
        )


class SetRepository:
    """Recorded sets under session exercises."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path

    async def insert(
        self,
        session_exercise_id: int,
        weight=None,
        weight_unit=None,
        reps=None,
        duration_sec=None,
        distance_m=None,
        assisted=0,
        notes=None,
    ) -> WorkoutSet:
        """Record a set at the next position and return the stored row.

        The position is one past the highest position ever assigned under
        ``session_exercise_id``, so deleting sets never frees a position.

        Raises:
            ValueError: If a numeric field cannot be parsed
            aiosqlite.IntegrityError: If the session exercise does not exist
        """
        fields = normalize_set_fields(
            weight=weight,
            weight_unit=weight_unit,
            reps=reps,
            duration_sec=duration_sec,
            distance_m=distance_m,
            assisted=assisted,
            notes=notes,
        )
        created_at = now_ms()

        db = await get_connection(self.db_path)
        async with transaction(db):
            position = await self._next_position(db, session_exercise_id)
            set_id = await insert_returning_id(
                db,
                """
                INSERT INTO sets (
                    session_exercise_id, position, weight, weight_unit, reps,
                    duration_sec, distance_m, assisted, notes, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    session_exercise_id,
                    position,
                    fields["weight"],
                    fields["weight_unit"],
                    fields["reps"],
                    fields["duration_sec"],
                    fields["distance_m"],
                    fields["assisted"],
                    fields["notes"],
                    created_at,
                ),
            )
            await db.execute(
                """
                UPDATE session_exercises SET last_set_position = ?
                WHERE id = ? AND last_set_position < ?
                """,
                (position, session_exercise_id, position),
            )

        return WorkoutSet(
            id=set_id,
            session_exercise_id=session_exercise_id,
            position=position,
            created_at=created_at,
            **fields,
        )

    async def _next_position(self, db: aiosqlite.Connection, session_exercise_id: int) -> int:
        cursor = await db.execute(
            """
            SELECT MAX(
                COALESCE((SELECT MAX(position) FROM sets WHERE session_exercise_id = ?), 0),
                COALESCE((SELECT last_set_position FROM session_exercises WHERE id = ?), 0)
            ) + 1
            """,
            (session_exercise_id, session_exercise_id),
        )
        row = await cursor.fetchone()
        return int(row[0]) if row is not None else 1

    async def get(self, set_id: int) -> WorkoutSet | None:
        db = await get_connection(self.db_path)
        cursor = await db.execute(f"SELECT {_SETS_SELECT} FROM sets s WHERE s.id = ?", (set_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_set(row)

    async def list_for(self, session_exercise_id: int) -> list[WorkoutSet]:
        """List sets in recorded order."""
        db = await get_connection(self.db_path)
        cursor = await db.execute(
            f"""
            SELECT {_SETS_SELECT} FROM sets s
            WHERE s.session_exercise_id = ?
            ORDER BY s.position ASC, s.id ASC
            """,
            (session_exercise_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_set(row) for row in rows]

    async def delete(self, set_id: int) -> bool:
        db = await get_connection(self.db_path)
        async with transaction(db):
            cursor = await db.execute("DELETE FROM sets WHERE id = ?", (set_id,))
        return cursor.rowcount > 0

    async def latest_for(self, exercise_name: str) -> WorkoutSet | None:
        """Most recent set logged under ``exercise_name`` in any session."""
        db = await get_connection(self.db_path)
        cursor = await db.execute(
            f"""
            SELECT {_SETS_SELECT}
            FROM sets s
            JOIN session_exercises se ON se.id = s.session_exercise_id
            WHERE se.exercise_name = ?
            ORDER BY s.created_at DESC, s.id DESC
            LIMIT 1
            """,
            (exercise_name,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_set(row)

    async def personal_best(self, exercise_name: str) -> float | None:
        """Heaviest weight ever logged under ``exercise_name``."""
        db = await get_connection(self.db_path)
        cursor = await db.execute(
            """
            SELECT MAX(s.weight)
            FROM sets s
            JOIN session_exercises se ON se.id = s.session_exercise_id
            WHERE se.exercise_name = ?
            """,
            (exercise_name,),
        )
        row = await cursor.fetchone()
        if row is None or row[0] is None:
            return None
        return float(row[0])

    def _row_to_set(self, row: aiosqlite.Row) -> WorkoutSet:
        """Convert a database row to a WorkoutSet."""
        return WorkoutSet(
            id=row["id"],
            session_exercise_id=row["session_exercise_id"],
            position=row["position"],
            weight=row["weight"],
            weight_unit=row["weight_unit"],
            reps=row["reps"],
            duration_sec=row["duration_sec"],
            distance_m=row["distance_m"],
            assisted=row["assisted"],
            notes=row["notes"],
            created_at=row["created_at"],
        )
