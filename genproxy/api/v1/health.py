"""Health check endpoint."""

import platform
import sys

from fastapi import APIRouter

from genproxy.config import settings
from genproxy.media.toolkit import get_media_toolkit

router = APIRouter()


@router.get("/health")
async def health_check():
    """Service health and which providers are configured."""
    return {
        "status": "healthy",
        "providers": {
            "wavespeed": bool(settings.wavespeed_api_key),
            "supabase": bool(settings.supabase_url and settings.supabase_anon_key),
            "resend": bool(settings.resend_api_key),
        },
        "media_toolkit_ready": get_media_toolkit().ready,
        "python_version": sys.version,
        "platform": platform.platform(),
    }
