"""Helper utilities."""

from .exercise_utils import resolve_exercise_name, session_focus_choices

__all__ = ["resolve_exercise_name", "session_focus_choices"]
