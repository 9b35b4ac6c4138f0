"""Core exceptions shared by repositories and services."""


class ConfigError(Exception):
    """Mandatory configuration is missing or invalid."""


class DatabaseError(Exception):
    """Base class for database connection problems."""


class DatabaseNotConnected(DatabaseError):
    """A repository was used before the connection was established."""

    def __init__(self, message: str = "Database is not connected"):
        self.message = message
        super().__init__(self.message)


class DatabaseConnectionError(DatabaseError):
    """Connecting to the database failed."""


class DatabaseConnectionTimeout(DatabaseConnectionError):
    """Connecting to the database took longer than the configured timeout."""


class DocumentExists(ValueError):
    """A document with the same id is already stored."""
