import secrets

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from abjudge.config import settings
from abjudge.errors import (
    AnalysisError,
    EncodingError,
    TransportError,
    TransportFailure,
    VariantValidationError,
    user_message,
)
from abjudge.logging import RequestLoggingMiddleware, setup_logging
from abjudge.routers.analysis import router as analysis_router
from abjudge.service import is_offline

setup_logging(settings.log_level)

app = FastAPI(title="Creative A/B Judge")


class APIKeyMiddleware(BaseHTTPMiddleware):
    """Validate X-API-Key header on all requests except /health.

    When settings.api_key is empty, authentication is disabled (local dev mode).
    Uses timing-safe comparison to prevent timing attacks.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        if not settings.api_key:
            return await call_next(request)

        # CORS preflight never carries custom headers
        if request.method == "OPTIONS" or request.url.path == "/health":
            return await call_next(request)

        provided_key = request.headers.get("X-API-Key", "")
        if not provided_key or not secrets.compare_digest(provided_key, settings.api_key):
            client_ip = request.client.host if request.client else "unknown"
            logger.warning("Invalid or missing API key from {client_ip}", client_ip=client_ip)
            return JSONResponse(status_code=401, content={"detail": "Invalid or missing API key"})

        return await call_next(request)


def _status_for(exc: AnalysisError) -> int:
    if isinstance(exc, (VariantValidationError, EncodingError)):
        return 400
    if isinstance(exc, TransportError) and exc.failure is TransportFailure.OVERLOADED:
        return 503
    return 502


@app.exception_handler(AnalysisError)
async def analysis_error_handler(request: Request, exc: AnalysisError) -> JSONResponse:
    status = _status_for(exc)
    logger.warning("Analysis rejected ({kind}, {status}): {exc}", kind=exc.kind, status=status, exc=exc)
    return JSONResponse(
        status_code=status,
        content={"detail": user_message(exc, settings.output_language), "kind": exc.kind},
    )


app.add_middleware(
    CORSMiddleware,  # ty: ignore[invalid-argument-type]  # Starlette ParamSpec typing limitation
    allow_origins=["*"],  # Permissive for prototype; tighten for production
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["*"],
)
app.add_middleware(APIKeyMiddleware)  # ty: ignore[invalid-argument-type]  # same Starlette issue
app.add_middleware(RequestLoggingMiddleware)  # ty: ignore[invalid-argument-type]  # same Starlette issue

app.include_router(analysis_router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok", "auth_required": bool(settings.api_key), "offline": is_offline()}


def run() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
