# src/yatai_stage/api/v1/endpoints/users.py
"""Profile timeline and follow endpoints."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Query

from yatai_stage.api.v1.dependencies import (
    CurrentUserDep,
    DispatcherDep,
    SessionDep,
    TimelineEngineDep,
    ViewerDep,
    to_http_error,
)
from yatai_stage.api.v1.endpoints.posts import reject_both_cursors
from yatai_stage.schemas.common import DataResponse, ListResponse
from yatai_stage.schemas.stats import FollowState
from yatai_stage.schemas.timeline import FeedItem
from yatai_stage.services import users
from yatai_stage.services.errors import ServiceError
from yatai_stage.services.timeline import TimelineRequest

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{username}/posts", response_model=ListResponse[FeedItem])
async def list_profile_timeline(
    username: str,
    db: SessionDep,
    engine: TimelineEngineDep,
    dispatcher: DispatcherDep,
    viewer_id: ViewerDep,
    background_tasks: BackgroundTasks,
    after: Annotated[str | None, Query()] = None,
    before: Annotated[str | None, Query()] = None,
) -> ListResponse[FeedItem]:
    """Return the user's own posts and reposts, merged like the main timeline.

    Raises:
        HTTPException: 404 for a missing or deactivated user or an unknown cursor
    """
    reject_both_cursors(after, before)
    try:
        author = users.get_active_user_by_username(db, username)
        page = engine.fetch_page(
            TimelineRequest(
                viewer_id=viewer_id,
                after=after,
                before=before,
                author_id=author.id,
            )
        )
    except ServiceError as exc:
        raise to_http_error(exc) from exc

    background_tasks.add_task(dispatcher.dispatch, page.side_effects)
    return ListResponse.of(page.items)


@router.post("/{username}/follow", response_model=DataResponse[FollowState])
async def follow(
    username: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> DataResponse[FollowState]:
    try:
        followee = users.follow_user(db, current_user, username)
    except ServiceError as exc:
        raise to_http_error(exc) from exc
    db.commit()
    return DataResponse(data=FollowState(username=followee.username, following=True))


@router.delete("/{username}/follow", response_model=DataResponse[FollowState])
async def unfollow(
    username: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> DataResponse[FollowState]:
    try:
        followee = users.unfollow_user(db, current_user, username)
    except ServiceError as exc:
        raise to_http_error(exc) from exc
    db.commit()
    return DataResponse(data=FollowState(username=followee.username, following=False))
