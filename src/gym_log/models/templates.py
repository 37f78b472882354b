"""Session templates and exercise aliases (data only).

Template names are canonical catalog names and must exist in
``data/exercises_seed.csv``.
"""

from dataclasses import dataclass, field

SESSION_TYPES = ["push", "pull", "legs", "mixed", "cardio", "other"]


@dataclass(frozen=True)
class SessionTemplate:
    """Exercises suggested for a session focus."""

    anchors: list[str] = field(default_factory=list)
    suggested: list[str] = field(default_factory=list)

    @property
    def exercise_names(self) -> list[str]:
        """Anchors first, then suggestions."""
        return [*self.anchors, *self.suggested]


TEMPLATES: dict[str, SessionTemplate] = {
    "push": SessionTemplate(
        anchors=["Incline dumbbell press", "Chest fly machine"],
        suggested=["Seated shoulder press machine", "Lateral raises"],
    ),
    "pull": SessionTemplate(
        anchors=["Lat pulldown", "Seated cable row"],
        suggested=["Single-arm cable row", "Face pull"],
    ),
    "legs": SessionTemplate(
        anchors=["Smith machine Squat", "Seated leg curl", "Leg extension"],
        suggested=["Leg press", "Adductor machine"],
    ),
    # Non-prescriptive session types
    "mixed": SessionTemplate(),
    "cardio": SessionTemplate(),
    "other": SessionTemplate(),
}

# Template wording or variants -> canonical seed name
EXERCISE_ALIASES: dict[str, str] = {
    # Push
    "Incline chest press": "Incline dumbbell press",
    "Incline chest press (db or machine)": "Incline dumbbell press",
    "Secondary chest movement": "Chest fly machine",
    "Chest fly": "Chest fly machine",
    "Shoulder press": "Seated shoulder press machine",
    "Lateral raise": "Lateral raises",
    # Pull
    "Lat pulldown or assisted pull-up": "Lat pulldown",
    "Assisted pull-up": "Assisted pull-ups",
    "Horizontal row": "Seated cable row",
    "Rear delt / upper back": "Face pull",
    # Legs
    "Squat machine": "Smith machine Squat",
    "Smith squat": "Smith machine Squat",
    "Leg curl": "Seated leg curl",
    "Hip adductor": "Adductor machine",
}
