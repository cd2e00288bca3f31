"""Generation Proxy - FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from genproxy.api.v1 import deps
from genproxy.api.v1.health import router as health_root_router
from genproxy.api.v1.router import proxy_router, v1_router
from genproxy.config import settings
from genproxy.errors import ProxyError
from genproxy.logging_config import setup_logging
from genproxy.providers.wavespeed import WavespeedClient
from genproxy.services.contact import ContactMailer
from genproxy.services.generation import GenerationService

logger = logging.getLogger("genproxy.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic."""
    setup_logging()
    logger.info("Starting Generation Proxy on port %s", settings.port)
    if not settings.wavespeed_api_key:
        logger.warning("WAVESPEED_API_KEY is not set; generation routes will answer config-error")
    if not settings.supabase_url or not settings.supabase_anon_key:
        logger.warning("Supabase is not configured; history routes will answer config-error")
    if not settings.resend_api_key:
        logger.warning("RESEND_API_KEY is not set; contact route will answer config-error")

    deps.set_generation_service(GenerationService(WavespeedClient.from_settings(settings)))
    deps.set_contact_mailer(ContactMailer(settings))

    yield

    logger.info("Shutting down Generation Proxy")
    deps.set_generation_service(None)
    deps.set_contact_mailer(None)


app = FastAPI(
    title="Generation Proxy",
    description="Proxy routes for AI image, video and transcription providers",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ProxyError)
async def proxy_error_handler(request: Request, exc: ProxyError):
    if exc.status_code >= 500:
        logger.error("%s %s failed [%s]: %s", request.method, request.url.path, exc.kind, exc.message)
    else:
        logger.info("%s %s rejected [%s]: %s", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        {"error": "Invalid request body", "kind": "validation-error"},
        status_code=400,
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        {"error": exc.detail, "kind": "http-error"},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": str(exc) or "Internal server error", "kind": "internal-error"}, status_code=500)


# Mount routers
app.include_router(health_root_router, tags=["health"])  # GET /health at root
app.include_router(v1_router)  # /api/v1/health, /api/v1/models
app.include_router(proxy_router)  # /api/generate, /api/transcribe, ...
