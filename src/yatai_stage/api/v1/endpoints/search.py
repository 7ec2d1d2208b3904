# src/yatai_stage/api/v1/endpoints/search.py
"""Keyword search endpoint."""

from typing import Annotated, Literal

from fastapi import APIRouter, BackgroundTasks, Query
from sqlalchemy.orm import Session

from yatai_stage.api.v1.dependencies import (
    DispatcherDep,
    SessionDep,
    ViewerDep,
    to_http_error,
)
from yatai_stage.core.settings import settings
from yatai_stage.db.time import ensure_utc
from yatai_stage.repositories.post_repo import Candidate
from yatai_stage.schemas.common import ListResponse
from yatai_stage.schemas.search import UserSearchResult
from yatai_stage.schemas.timeline import FeedItem
from yatai_stage.services import search
from yatai_stage.services.errors import ServiceError
from yatai_stage.services.impressions import impression_commands
from yatai_stage.services.projection import build_projector

router = APIRouter(prefix="/search", tags=["search"])


@router.get("", response_model=ListResponse[FeedItem | UserSearchResult])
async def search_content(
    db: SessionDep,
    viewer_id: ViewerDep,
    dispatcher: DispatcherDep,
    background_tasks: BackgroundTasks,
    q: Annotated[str, Query(min_length=1, description="Space separated search words")],
    kind: Annotated[Literal["posts", "products", "users"], Query(alias="type")] = "posts",
    tag: Annotated[bool, Query(description="Also match tag names")] = False,
    before: Annotated[str | None, Query(description="Results older than this id")] = None,
) -> ListResponse[FeedItem | UserSearchResult]:
    """Search posts, product listings or users, newest first.

    Raises:
        HTTPException: 400 for a blank query, 404 for an unknown cursor
    """
    try:
        query = search.parse_query(q, kind=kind, include_tags=tag, before=before)
        if query.kind == "users":
            return ListResponse.of(_user_results(db, viewer_id, query))
        posts = search.search_posts(db, query, limit=settings.timeline_page_size)
    except ServiceError as exc:
        raise to_http_error(exc) from exc

    projector = build_projector(db, viewer_id, posts)
    items = [
        projector.feed_item(
            Candidate(
                entry_id=post.id,
                kind="post",
                created_at=ensure_utc(post.created_at),
                actor=post.author,
                post=post,
            )
        )
        for post in posts
    ]
    background_tasks.add_task(
        dispatcher.dispatch,
        impression_commands((post.id for post in posts), timezone=settings.local_timezone),
    )
    return ListResponse.of(items)


def _user_results(db: Session, viewer_id: str, query: search.SearchQuery) -> list[UserSearchResult]:
    found = search.search_users(db, query, limit=settings.timeline_page_size)
    following = search.followed_ids(db, viewer_id, [user.id for user in found])
    return [
        UserSearchResult(
            id=user.id,
            username=user.username,
            nickname=user.nickname,
            icon_link=user.icon_link,
            bio=user.bio,
            created_at=ensure_utc(user.created_at),
            viewer_is_following=user.id in following,
        )
        for user in found
    ]
