"""
Index router.

GET /    - scaffold welcome page
GET /db  - asks the database server about itself through the shared pool
"""

from typing import Any, Dict

from fastapi import APIRouter

from app.api.deps import DatabaseDep
from app.config import get_settings

router = APIRouter(tags=["index"])


@router.get("/")
async def index() -> Dict[str, str]:
    title = get_settings().app_title
    return {"title": title, "message": f"Welcome to {title}"}


@router.get("/db")
async def database_info(db: DatabaseDep) -> Dict[str, Any]:
    """
    Query the database handle.

    A database that cannot be reached surfaces as 503 via the
    application's exception handlers.
    """
    info = await db.server_info()
    return info.to_dict()
