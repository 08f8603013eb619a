from fastapi import APIRouter

from app.api.routes import health, index, users

api_router = APIRouter()
api_router.include_router(index.router)
api_router.include_router(users.router)
api_router.include_router(health.router)
