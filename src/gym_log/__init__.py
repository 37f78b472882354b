"""gym-log: offline workout logging on a local SQLite store."""

__version__ = "0.1.0"
