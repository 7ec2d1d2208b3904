# src/yatai_stage/main.py
"""Main entry point for the Yatai application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from yatai_stage.api.v1 import (
    engagement_router,
    posts_router,
    products_router,
    search_router,
    stats_router,
    system_router,
    users_router,
)
from yatai_stage.core.settings import settings
from yatai_stage.schemas.common import ErrorResponse

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Yatai API",
    description="Timeline and marketplace API for creators",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(posts_router, prefix="/api/v1")
app.include_router(engagement_router, prefix="/api/v1")
app.include_router(products_router, prefix="/api/v1")
app.include_router(search_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(stats_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


def _error(status_code: int, error: str | list[str]) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error).model_dump(),
    )


def _field_messages(exc: RequestValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        # Drop the "query"/"body"/"path" source prefix.
        location = [str(part) for part in error.get("loc", ())[1:]]
        field = ".".join(location) or "request"
        messages.append(f"{field}: {error.get('msg', 'invalid value')}")
    return messages


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail
    if not isinstance(detail, (str, list)):
        detail = str(detail)
    return _error(exc.status_code, detail)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return _error(status.HTTP_400_BAD_REQUEST, _field_messages(exc))


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("yatai_stage.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
