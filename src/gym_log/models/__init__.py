"""Data models for gym-log."""

from .exercises import DEFAULT_MEASUREMENT_TYPE, Exercise, MeasurementType
from .session import Session, SessionStatus
from .sets import (
    Cardio,
    NotesOnly,
    SessionExercise,
    TimeOnly,
    WeightReps,
    WorkoutSet,
    describe_set,
    normalize_set_fields,
    parse_duration,
)
from .templates import EXERCISE_ALIASES, SESSION_TYPES, TEMPLATES, SessionTemplate

__all__ = [
    "Cardio",
    "DEFAULT_MEASUREMENT_TYPE",
    "EXERCISE_ALIASES",
    "Exercise",
    "MeasurementType",
    "NotesOnly",
    "Session",
    "SessionExercise",
    "SessionStatus",
    "SessionTemplate",
    "SESSION_TYPES",
    "TEMPLATES",
    "TimeOnly",
    "WeightReps",
    "WorkoutSet",
    "describe_set",
    "normalize_set_fields",
    "parse_duration",
]
