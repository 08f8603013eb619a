"""
Data Models

These models define the structure for:
- Connection pool configuration
- Database server information returned by the index router
- Health probe results
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import List, Optional, Dict, Any
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode


# =============================================================================
# Pool Configuration
# =============================================================================

@dataclass(frozen=True)
class PoolSettings:
    """
    Settings handed to the pooling library.

    ssl=False passes no TLS parameter at all, so an sslmode in the
    connection string still applies.
    """
    dsn: str  # e.g., "postgresql://user:password@db:5432/app"
    ssl: bool = False
    ssl_verify: bool = True
    min_size: int = 1
    max_size: int = 10
    command_timeout: Optional[float] = 30.0

    def __post_init__(self):
        if not self.dsn:
            from app.db.errors import DatabaseNotConfiguredError
            raise DatabaseNotConfiguredError("Connection string must not be empty")
        if self.min_size < 0 or self.max_size < 1 or self.min_size > self.max_size:
            raise ValueError(
                f"Invalid pool bounds: min_size={self.min_size}, max_size={self.max_size}"
            )

    def redacted_dsn(self) -> str:
        """Connection string with passwords masked, for logging."""
        parts = urlsplit(self.dsn)
        netloc = parts.netloc
        if parts.password is not None:
            credentials, _, location = netloc.rpartition("@")
            user = credentials.partition(":")[0]
            netloc = f"{user}:***@{location}"

        query = parts.query
        if query:
            # asyncpg also takes the password as a query parameter
            pairs = parse_qsl(query, keep_blank_values=True)
            query = urlencode(
                [(k, "***" if k.lower() == "password" else v) for k, v in pairs],
                safe="*",
            )

        return urlunsplit(parts._replace(netloc=netloc, query=query))


# =============================================================================
# Query Results
# =============================================================================

@dataclass
class ServerInfo:
    """What the database server reports about itself."""
    now: datetime
    version: str
    database: str
    user: str

    @classmethod
    def from_record(cls, record: Any) -> "ServerInfo":
        return cls(
            now=record["now"],
            version=record["version"],
            database=record["database"],
            user=record["user"],
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["now"] = self.now.isoformat()
        return data


@dataclass
class HealthStatus:
    """Result of a readiness probe."""
    ok: bool
    database: Optional[bool] = None  # None when the probe did not look
    failures: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "ok" if self.ok else "unavailable",
            "database": self.database,
            "failures": list(self.failures),
        }
