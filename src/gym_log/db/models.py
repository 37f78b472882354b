"""Table definitions (DDL and the exported column order)."""

SESSIONS_COLUMNS = (
    "id",
    "date",
    "focus",
    "notes",
    "status",
    "created_at",
    "finished_at",
)

EXERCISES_COLUMNS = ("id", "name", "created_at")
EXERCISES_COLUMNS_SCHEMA_AWARE = ("id", "name", "measurement_type", "created_at")

SESSION_EXERCISES_COLUMNS = (
    "id",
    "session_id",
    "exercise_name",
    "notes",
    "created_at",
    "position",
)

SETS_COLUMNS = (
    "id",
    "session_exercise_id",
    "position",
    "weight",
    "weight_unit",
    "reps",
    "duration_sec",
    "distance_m",
    "assisted",
    "notes",
    "created_at",
)

# Current shape of every table. Older stores are brought here by the
# migrations in engine.py, never by editing these statements.
CREATE_TABLES = (
    """
    CREATE TABLE IF NOT EXISTS sessions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        date TEXT NOT NULL,
        focus TEXT NOT NULL,
        notes TEXT,
        status TEXT NOT NULL DEFAULT 'active',
        created_at INTEGER NOT NULL,
        finished_at INTEGER
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS app_state (
        key TEXT PRIMARY KEY,
        value TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS exercises (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE,
        measurement_type TEXT NOT NULL DEFAULT 'weight_reps',
        created_at INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS session_exercises (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        session_id INTEGER NOT NULL,
        exercise_name TEXT NOT NULL,
        notes TEXT,
        created_at INTEGER NOT NULL,
        position INTEGER NOT NULL DEFAULT 0,
        last_set_position INTEGER NOT NULL DEFAULT 0,
        FOREIGN KEY (session_id) REFERENCES sessions(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS sets (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        session_exercise_id INTEGER NOT NULL,
        position INTEGER NOT NULL,
        weight REAL NULL,
        weight_unit TEXT NULL,
        reps INTEGER NULL,
        duration_sec INTEGER NULL,
        distance_m REAL NULL,
        assisted INTEGER NOT NULL DEFAULT 0,
        notes TEXT NULL,
        created_at INTEGER NOT NULL,
        FOREIGN KEY (session_exercise_id) REFERENCES session_exercises(id) ON DELETE CASCADE
    )
    """,
)

CREATE_INDEXES = (
    """
    CREATE INDEX IF NOT EXISTS idx_sets_session_exercise_id
    ON sets(session_exercise_id)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_session_exercises_session
    ON session_exercises(session_id)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_session_exercises_name
    ON session_exercises(exercise_name)
    """,
)
