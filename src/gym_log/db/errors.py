"""Storage-layer exceptions."""


class GymLogError(Exception):
    """Base class for gym-log storage errors."""


class DatabaseInitError(GymLogError):
    """The database connection could not be established or opened."""


class MigrationError(GymLogError):
    """A schema migration failed for a reason other than being already applied."""

    def __init__(self, version: int, description: str, cause: Exception):
        self.version = version
        self.description = description
        self.cause = cause
        super().__init__(f"Migration {version} ({description}) failed: {cause}")


class MissingRowIdError(GymLogError):
    """An insert succeeded but its generated id could not be determined."""
