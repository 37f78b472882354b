"""CLI commands for gym-log."""

from .exercises import exercise
from .export import export, restore
from .init import init
from .sessions import session
from .sets import set_group

__all__ = [
    "exercise",
    "export",
    "init",
    "restore",
    "session",
    "set_group",
]
