"""Aggregate all API routers."""

from fastapi import APIRouter
from genproxy.api.v1.contact import router as contact_router
from genproxy.api.v1.generate import router as generate_router
from genproxy.api.v1.health import router as health_router
from genproxy.api.v1.history import router as history_router
from genproxy.api.v1.models_api import router as models_router
from genproxy.api.v1.transcribe import router as transcribe_router
from genproxy.api.v1.video import router as video_router

v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(health_router, tags=["health"])
v1_router.include_router(models_router, tags=["models"])

# Proxy routes at the paths the web front-end calls (/api/generate, ...)
proxy_router = APIRouter(prefix="/api")
proxy_router.include_router(generate_router, tags=["generate"])
proxy_router.include_router(video_router, tags=["video"])
proxy_router.include_router(transcribe_router, tags=["transcribe"])
proxy_router.include_router(contact_router, tags=["contact"])
proxy_router.include_router(history_router, tags=["history"])
