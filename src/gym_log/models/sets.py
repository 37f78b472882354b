"""Session exercises, recorded sets and measurement variants."""

import math
from dataclasses import dataclass
from typing import Any, Union

from .exercises import DEFAULT_MEASUREMENT_TYPE, MeasurementType

_FALSE_STRINGS = {"0", "false", "no", "off"}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _to_float(value: Any, field_name: str) -> float | None:
    if _is_blank(value):
        return None
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"{field_name} must be a finite number, got {value!r}")
    return number


def _to_int(value: Any, field_name: str) -> int | None:
    number = _to_float(value, field_name)
    if number is None:
        return None
    if not number.is_integer():
        raise ValueError(f"{field_name} must be a whole number, got {value!r}")
    return int(number)


def _to_text(value: Any) -> str | None:
    if _is_blank(value):
        return None
    return str(value)


def _to_flag(value: Any) -> int:
    if isinstance(value, str):
        return 0 if value.strip().lower() in _FALSE_STRINGS or not value.strip() else 1
    return 1 if value else 0


def normalize_set_fields(
    weight: Any = None,
    weight_unit: Any = None,
    reps: Any = None,
    duration_sec: Any = None,
    distance_m: Any = None,
    assisted: Any = 0,
    notes: Any = None,
) -> dict:
    """Normalize raw set input into storable column values.

    Empty strings and None become NULL, numerics are coerced and
    ``assisted`` becomes a 0/1 flag. Every field is kept regardless of the
    exercise's measurement type.

    Raises:
        ValueError: If a numeric field cannot be parsed
    """
    return {
        "weight": _to_float(weight, "weight"),
        "weight_unit": _to_text(weight_unit),
        "reps": _to_int(reps, "reps"),
        "duration_sec": _to_int(duration_sec, "duration_sec"),
        "distance_m": _to_float(distance_m, "distance_m"),
        "assisted": _to_flag(assisted),
        "notes": _to_text(notes),
    }


@dataclass(frozen=True)
class WeightReps:
    weight: float | None
    weight_unit: str | None
    reps: int | None
    assisted: bool = False


@dataclass(frozen=True)
class TimeOnly:
    duration_sec: int | None


@dataclass(frozen=True)
class Cardio:
    duration_sec: int | None
    distance_m: float | None


@dataclass(frozen=True)
class NotesOnly:
    notes: str | None


Measurement = Union[WeightReps, TimeOnly, Cardio, NotesOnly]


@dataclass
class SessionExercise:
    """An exercise attached to a session.

    ``exercise_name`` is a point-in-time snapshot of the name, not a key into
    the catalog; ``measurement_type`` is resolved by name when read.
    """

    session_id: int
    exercise_name: str
    notes: str | None = None
    position: int = 0
    created_at: int | None = None
    measurement_type: MeasurementType = DEFAULT_MEASUREMENT_TYPE
    id: int | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "session_id": self.session_id,
            "exercise_name": self.exercise_name,
            "notes": self.notes,
            "created_at": self.created_at,
            "position": self.position,
            "measurement_type": self.measurement_type.value,
        }


@dataclass
class WorkoutSet:
    """One recorded set. Never updated in place."""

    session_exercise_id: int
    position: int
    weight: float | None = None
    weight_unit: str | None = None
    reps: int | None = None
    duration_sec: int | None = None
    distance_m: float | None = None
    assisted: int = 0
    notes: str | None = None
    created_at: int | None = None
    id: int | None = None

    def measurement(
        self, measurement_type: MeasurementType = DEFAULT_MEASUREMENT_TYPE
    ) -> Measurement:
        """Project the stored columns onto the variant for ``measurement_type``."""
        if measurement_type == MeasurementType.TIME_ONLY:
            return TimeOnly(duration_sec=self.duration_sec)
        if measurement_type == MeasurementType.CARDIO:
            return Cardio(duration_sec=self.duration_sec, distance_m=self.distance_m)
        if measurement_type == MeasurementType.NOTES_ONLY:
            return NotesOnly(notes=self.notes)
        return WeightReps(
            weight=self.weight,
            weight_unit=self.weight_unit,
            reps=self.reps,
            assisted=bool(self.assisted),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary (export column order)."""
        return {
            "id": self.id,
            "session_exercise_id": self.session_exercise_id,
            "position": self.position,
            "weight": self.weight,
            "weight_unit": self.weight_unit,
            "reps": self.reps,
            "duration_sec": self.duration_sec,
            "distance_m": self.distance_m,
            "assisted": self.assisted,
            "notes": self.notes,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutSet":
        """Create from dictionary."""
        return cls(
            id=data.get("id"),
            session_exercise_id=data["session_exercise_id"],
            position=data["position"],
            weight=data.get("weight"),
            weight_unit=data.get("weight_unit"),
            reps=data.get("reps"),
            duration_sec=data.get("duration_sec"),
            distance_m=data.get("distance_m"),
            assisted=data.get("assisted") or 0,
            notes=data.get("notes"),
            created_at=data.get("created_at"),
        )


def format_duration(seconds: int) -> str:
    """Format seconds as ``m:ss`` (or ``h:mm:ss`` past an hour)."""
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def _format_number(value: float) -> str:
    return f"{value:g}"


def describe_set(
    workout_set: WorkoutSet,
    measurement_type: MeasurementType = DEFAULT_MEASUREMENT_TYPE,
) -> str:
    """Short display label for a set, e.g. ``#2: 100kg x 5``."""
    label = f"#{workout_set.position}"
    m = workout_set.measurement(measurement_type)
    parts: list[str] = []

    if isinstance(m, WeightReps):
        unit = m.weight_unit or "kg"
        if m.weight is not None and m.reps is not None:
            parts.append(f"{_format_number(m.weight)}{unit} x {m.reps}")
        elif m.weight is not None:
            parts.append(f"{_format_number(m.weight)}{unit}")
        elif m.reps is not None:
            parts.append(f"{m.reps} reps")
        if m.assisted and parts:
            parts[-1] += " (assisted)"
    elif isinstance(m, TimeOnly):
        if m.duration_sec is not None:
            parts.append(format_duration(m.duration_sec))
    elif isinstance(m, Cardio):
        if m.duration_sec is not None:
            parts.append(format_duration(m.duration_sec))
        if m.distance_m is not None:
            parts.append(f"{_format_number(m.distance_m)} m")
    elif isinstance(m, NotesOnly):
        if m.notes:
            parts.append(m.notes)

    if parts:
        label += ": " + ", ".join(parts)
    return label


def parse_duration(value: Any) -> int | None:
    """Parse ``ss``, ``m:ss`` or ``h:mm:ss`` into seconds (None when blank).

    Raises:
        ValueError: If the value is not a duration
    """
    if _is_blank(value):
        return None
    parts = str(value).strip().split(":")
    if len(parts) > 3 or not all(p.strip().isdigit() for p in parts):
        raise ValueError(f"Invalid duration {value!r}, expected ss, m:ss or h:mm:ss")

    seconds = 0
    for part in parts:
        seconds = seconds * 60 + int(part)
    return seconds
