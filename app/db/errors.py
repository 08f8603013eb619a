"""
Typed database errors.

The service does not retry; every failure reaching a caller is one of these.
"""


class DatabaseError(Exception):
    """Base class for database layer errors."""


class DatabaseNotConfiguredError(DatabaseError, ValueError):
    """DATABASE_URL is missing, so no pool can be created."""


class DatabaseUnavailableError(DatabaseError):
    """The pool could not be opened or a connection failed mid-query."""
