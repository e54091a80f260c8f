"""Version 1 API routers."""

from fastapi import APIRouter

from app.api.v1 import admin, generate, sora

api_router = APIRouter(prefix="/api")
api_router.include_router(generate.router)
api_router.include_router(sora.router)
api_router.include_router(admin.router)

__all__ = ["api_router"]
