"""Services built on top of the repositories."""

from .export import build_export_document, export_tables, restore_export, write_export
from .sessions import SessionService, SessionSummary, SetSuggestion

__all__ = [
    "build_export_document",
    "export_tables",
    "restore_export",
    "SessionService",
    "SessionSummary",
    "SetSuggestion",
    "write_export",
]
