"""Master API router: mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from app.api import animations, health, svg

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(svg.router)
api_router.include_router(animations.router)
