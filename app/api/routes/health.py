from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.api.deps import DatabaseDep
from app.core.health import liveness_check, readiness_check

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness():
    """Liveness probe: the process answers. No I/O."""
    status = liveness_check()
    return status.to_dict()


@router.get("/ready")
async def readiness(db: DatabaseDep):
    """
    Readiness probe: can the service reach its database?

    Returns 200 when it can, 503 otherwise. The compose start order is not
    health-gated, so this is what an operator polls after `up`.
    """
    status = await readiness_check(db)
    if not status.ok:
        return JSONResponse(status_code=503, content=status.to_dict())
    return status.to_dict()
