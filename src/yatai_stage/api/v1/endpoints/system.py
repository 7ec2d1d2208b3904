"""System endpoints for the Yatai API."""

from __future__ import annotations

from fastapi import APIRouter
from sqlalchemy import text

from yatai_stage.api.v1.dependencies import SessionDep
from yatai_stage.core.settings import settings

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
        },
        "timeline": {
            "page_size": settings.timeline_page_size,
            "timezone": settings.local_timezone,
        },
        "media_base_path": settings.media_base_path,
    }


@router.get("/db")
async def database_status(db: SessionDep) -> dict[str, str]:
    """Report whether the database answers a trivial query."""
    db.execute(text("SELECT 1"))
    return {"database": "ok"}
