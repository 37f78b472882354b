"""Data loading utilities."""

from .exercise_loader import get_seed_path, parse_seed_text, seed_exercises

__all__ = ["get_seed_path", "parse_seed_text", "seed_exercises"]
