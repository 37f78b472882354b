"""Database layer for gym-log."""

from .engine import close_db, get_connection, get_db_path, init_db
from .errors import DatabaseInitError, GymLogError, MigrationError, MissingRowIdError
from .repositories import (
    AppStateRepository,
    ExerciseRepository,
    SessionExerciseRepository,
    SessionRepository,
    SetRepository,
)

__all__ = [
    "AppStateRepository",
    "close_db",
    "DatabaseInitError",
    "ExerciseRepository",
    "get_connection",
    "get_db_path",
    "GymLogError",
    "init_db",
    "MigrationError",
    "MissingRowIdError",
    "SessionExerciseRepository",
    "SessionRepository",
    "SetRepository",
]
