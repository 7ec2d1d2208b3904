# src/yatai_stage/api/v1/endpoints/engagement.py
"""Like and repost endpoints for the Yatai API."""

from fastapi import APIRouter, status

from yatai_stage.api.v1.dependencies import CurrentUserDep, SessionDep, to_http_error
from yatai_stage.api.v1.endpoints.posts import project_single
from yatai_stage.schemas.common import DataResponse
from yatai_stage.schemas.timeline import PostView
from yatai_stage.services import engagement
from yatai_stage.services.errors import ServiceError

router = APIRouter(prefix="/posts", tags=["engagement"])


@router.post(
    "/{post_id}/like",
    response_model=DataResponse[PostView],
    status_code=status.HTTP_201_CREATED,
)
async def like_post(
    post_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> DataResponse[PostView]:
    """Like a post.

    Raises:
        HTTPException: 404 if the post is missing, 400 if it is already liked
    """
    try:
        post = engagement.like_post(db, current_user, post_id)
    except ServiceError as exc:
        raise to_http_error(exc) from exc
    db.commit()
    return DataResponse(data=project_single(db, current_user.id, post))


@router.delete("/{post_id}/like", response_model=DataResponse[PostView])
async def unlike_post(
    post_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> DataResponse[PostView]:
    try:
        post = engagement.unlike_post(db, current_user, post_id)
    except ServiceError as exc:
        raise to_http_error(exc) from exc
    db.commit()
    return DataResponse(data=project_single(db, current_user.id, post))


@router.post(
    "/{post_id}/repost",
    response_model=DataResponse[PostView],
    status_code=status.HTTP_201_CREATED,
)
async def repost_post(
    post_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> DataResponse[PostView]:
    """Repost a top-level post so it resurfaces on timelines."""
    try:
        repost = engagement.repost_post(db, current_user, post_id)
    except ServiceError as exc:
        raise to_http_error(exc) from exc
    db.commit()
    return DataResponse(data=project_single(db, current_user.id, repost.post))


@router.delete("/{post_id}/repost", response_model=DataResponse[PostView])
async def unrepost_post(
    post_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> DataResponse[PostView]:
    try:
        post = engagement.unrepost_post(db, current_user, post_id)
    except ServiceError as exc:
        raise to_http_error(exc) from exc
    db.commit()
    return DataResponse(data=project_single(db, current_user.id, post))
