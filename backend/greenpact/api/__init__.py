"""API router aggregator."""
from fastapi import APIRouter

from greenpact.api.routes import admin, auth, users

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(admin.router)
api_router.include_router(users.router)

__all__ = ["api_router"]
