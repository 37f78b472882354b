"""Exercise catalog definitions."""

from dataclasses import dataclass
from enum import Enum


class MeasurementType(str, Enum):
    """How a set recorded for an exercise should be read."""

    WEIGHT_REPS = "weight_reps"
    TIME_ONLY = "time_only"
    CARDIO = "cardio"
    NOTES_ONLY = "notes_only"

    @classmethod
    def resolve(cls, value: "str | MeasurementType | None") -> "MeasurementType":
        """Map a stored (possibly NULL) value to a member, defaulting to weight_reps."""
        if value is None or value == "":
            return DEFAULT_MEASUREMENT_TYPE
        return cls(value)


DEFAULT_MEASUREMENT_TYPE = MeasurementType.WEIGHT_REPS

# Fields each measurement type gives meaning to. Sets store every column
# regardless; this is read-side only.
MEANINGFUL_FIELDS: dict[MeasurementType, tuple[str, ...]] = {
    MeasurementType.WEIGHT_REPS: ("weight", "weight_unit", "reps", "assisted"),
    MeasurementType.TIME_ONLY: ("duration_sec",),
    MeasurementType.CARDIO: ("duration_sec", "distance_m"),
    MeasurementType.NOTES_ONLY: ("notes",),
}


@dataclass
class Exercise:
    """A named movement in the catalog."""

    name: str
    measurement_type: MeasurementType = DEFAULT_MEASUREMENT_TYPE
    created_at: int | None = None  # epoch millis
    id: int | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "name": self.name,
            "measurement_type": self.measurement_type.value,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict, id: int | None = None) -> "Exercise":
        """Create from dictionary."""
        return cls(
            id=id if id is not None else data.get("id"),
            name=data["name"],
            measurement_type=MeasurementType.resolve(data.get("measurement_type")),
            created_at=data.get("created_at"),
        )
