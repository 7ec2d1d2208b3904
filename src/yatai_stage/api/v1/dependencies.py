"""Shared API dependencies for viewer resolution and common services."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from yatai_stage.core.settings import settings
from yatai_stage.db.session import SessionLocal, get_db
from yatai_stage.models import User
from yatai_stage.services.errors import (
    NotFoundError,
    PermissionDeniedError,
    ServiceError,
)
from yatai_stage.services.impressions import SideEffectDispatcher
from yatai_stage.services.timeline import TimelineEngine
from yatai_stage.services.viewer import ANONYMOUS, resolve_viewer

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_viewer_id(request: Request) -> str:
    """Return the viewer's user id, or the anonymous sentinel."""
    return resolve_viewer(request)


ViewerDep = Annotated[str, Depends(get_viewer_id)]


def get_current_user(viewer_id: ViewerDep, db: SessionDep) -> User:
    """Get the signed-in user for write endpoints.

    Raises:
        HTTPException: If there is no valid session or the account is inactive
    """
    if viewer_id == ANONYMOUS:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    user = db.get(User, viewer_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]


def get_side_effect_dispatcher() -> SideEffectDispatcher:
    """Dispatcher for impression commands, bound to its own sessions."""
    return SideEffectDispatcher(SessionLocal)


DispatcherDep = Annotated[SideEffectDispatcher, Depends(get_side_effect_dispatcher)]


def get_timeline_engine(db: SessionDep) -> TimelineEngine:
    return TimelineEngine(
        db,
        page_size=settings.timeline_page_size,
        timezone=settings.local_timezone,
    )


TimelineEngineDep = Annotated[TimelineEngine, Depends(get_timeline_engine)]


def to_http_error(exc: ServiceError) -> HTTPException:
    """Translate a service-layer failure into the matching HTTP error."""
    if isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, PermissionDeniedError):
        code = status.HTTP_403_FORBIDDEN
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=exc.message)
