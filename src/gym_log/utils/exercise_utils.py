"""Utilities for exercise name resolution."""

from ..models.templates import EXERCISE_ALIASES, SESSION_TYPES, TEMPLATES


def resolve_exercise_name(
    name: str | None, aliases: dict[str, str] | None = None
) -> str | None:
    """Resolve an alias to its canonical catalog name.

    Exact match after trimming; no fuzzy guessing. Names that are not aliases
    come back trimmed but otherwise unchanged.

    Args:
        name: The exercise name or alias
        aliases: Alias map (defaults to EXERCISE_ALIASES)

    Returns:
        The canonical name, or None for a blank name
    """
    if aliases is None:
        aliases = EXERCISE_ALIASES
    if not name:
        return None
    raw = str(name).strip()
    if not raw:
        return None
    return aliases.get(raw, raw)


def session_focus_choices() -> list[str]:
    """Focus labels offered when starting a session."""
    return [focus for focus in SESSION_TYPES if focus in TEMPLATES]
