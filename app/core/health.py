"""
Health-check helpers for liveness and readiness probes.

Liveness  - is the process alive?  (cheap, no I/O)
Readiness - can it serve traffic?  (Postgres reachable through the pool)
"""

import logging

from app.db.connection import Database
from app.models.schemas import HealthStatus

logger = logging.getLogger(__name__)


def liveness_check() -> HealthStatus:
    """Lightweight liveness probe. Same shape as readiness_check for consistency."""
    return HealthStatus(ok=True)


async def readiness_check(db: Database) -> HealthStatus:
    """Run SELECT 1 through the pool. The check itself never raises."""
    database_ok = await db.health_check()
    failures = [] if database_ok else ["Postgres: unreachable"]
    if failures:
        logger.warning("Readiness check failed: %s", ", ".join(failures))
    return HealthStatus(ok=database_ok, database=database_ok, failures=failures)
