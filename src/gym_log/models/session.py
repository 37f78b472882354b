"""Workout session model."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

DEFAULT_FOCUS = "other"


class SessionStatus(str, Enum):
    """Session lifecycle status. ``finished`` is terminal."""

    ACTIVE = "active"
    FINISHED = "finished"


def normalize_session_date(value: "str | date | None") -> str:
    """Return an ISO calendar date, today when blank or missing."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if value is not None and str(value).strip():
        return str(value).strip()
    return date.today().isoformat()


def normalize_focus(value: str | None) -> str:
    """Return the focus label, ``other`` when blank."""
    if value is not None and str(value).strip():
        return str(value).strip()
    return DEFAULT_FOCUS


@dataclass
class Session:
    """One workout occasion."""

    date: str
    focus: str = DEFAULT_FOCUS
    notes: str | None = None
    status: SessionStatus = SessionStatus.ACTIVE
    created_at: int | None = None  # epoch millis
    finished_at: int | None = None
    id: int | None = None

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "date": self.date,
            "focus": self.focus,
            "notes": self.notes,
            "status": self.status.value,
            "created_at": self.created_at,
            "finished_at": self.finished_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        """Create from dictionary."""
        return cls(
            id=data.get("id"),
            date=data["date"],
            focus=data.get("focus") or DEFAULT_FOCUS,
            notes=data.get("notes"),
            status=SessionStatus(data.get("status", "active")),
            created_at=data.get("created_at"),
            finished_at=data.get("finished_at"),
        )

    def get_status_display(self) -> str:
        """Get a human-readable status string."""
        status_map = {
            SessionStatus.ACTIVE: "In Progress",
            SessionStatus.FINISHED: "Finished",
        }
        return status_map.get(self.status, self.status.value)
