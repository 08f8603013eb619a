# Database module
from app.db.connection import (
    Database,
    build_ssl_context,
    get_db_pool,
    close_db_pool,
)
from app.db.errors import (
    DatabaseError,
    DatabaseNotConfiguredError,
    DatabaseUnavailableError,
)

__all__ = [
    "Database",
    "build_ssl_context",
    "get_db_pool",
    "close_db_pool",
    "DatabaseError",
    "DatabaseNotConfiguredError",
    "DatabaseUnavailableError",
]
