from typing import Annotated

from fastapi import Depends, Request

from app.db.connection import Database


def get_database(request: Request) -> Database:
    """Process-wide database handle created by the application lifespan."""
    return request.app.state.database


DatabaseDep = Annotated[Database, Depends(get_database)]
