from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_class=PlainTextResponse)
async def list_users() -> str:
    return "respond with a resource"
