# src/yatai_stage/api/v1/endpoints/posts.py
"""Post-related endpoints for the Yatai API."""

from typing import Annotated, Literal

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query, status
from sqlalchemy.orm import Session

from yatai_stage.api.v1.dependencies import (
    CurrentUserDep,
    DispatcherDep,
    SessionDep,
    TimelineEngineDep,
    ViewerDep,
    to_http_error,
)
from yatai_stage.core.settings import settings
from yatai_stage.db.time import ensure_utc
from yatai_stage.models import Post
from yatai_stage.repositories.post_repo import PostRepository
from yatai_stage.schemas.common import DataResponse, ListResponse
from yatai_stage.schemas.post import PostCreate, QuoteCreate, ReplyCreate
from yatai_stage.schemas.timeline import FeedItem, PostDetail, PostView
from yatai_stage.services import engagement
from yatai_stage.services.errors import ServiceError
from yatai_stage.services.filters import CursorAnchor
from yatai_stage.services.impressions import impression_commands
from yatai_stage.services.projection import build_projector
from yatai_stage.services.timeline import TimelineRequest

router = APIRouter(prefix="/posts", tags=["posts"])


def reject_both_cursors(after: str | None, before: str | None) -> None:
    """Raise 400 when a request names cursors on both sides."""
    if after and before:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=[
                "after: cannot be combined with before",
                "before: cannot be combined with after",
            ],
        )


def project_single(db: Session, viewer_id: str, post: Post) -> PostView:
    """Project one freshly written post for the viewer."""
    db.refresh(post)
    loaded = PostRepository(db).get_active(post.id, with_projection=True)
    if loaded is None:  # pragma: no cover - row was just written
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return build_projector(db, viewer_id, [loaded]).project(loaded)


@router.get("", response_model=ListResponse[FeedItem])
async def list_timeline(
    engine: TimelineEngineDep,
    dispatcher: DispatcherDep,
    viewer_id: ViewerDep,
    background_tasks: BackgroundTasks,
    tag_name: Annotated[
        str | None,
        Query(alias="tagName", description="Tag, 'following' or 'latest'"),
    ] = None,
    after: Annotated[str | None, Query(description="Entries newer than this id")] = None,
    before: Annotated[str | None, Query(description="Entries older than this id")] = None,
    live: Annotated[bool, Query(description="Only live release listings")] = False,
) -> ListResponse[FeedItem]:
    """Return one page of the merged post and repost timeline.

    Raises:
        HTTPException: 400 for conflicting cursors or an unknown tag, 404 for an
            unknown cursor
    """
    reject_both_cursors(after, before)
    try:
        page = engine.fetch_page(
            TimelineRequest(
                viewer_id=viewer_id,
                tag_name=tag_name,
                after=after,
                before=before,
                live_only=live,
            )
        )
    except ServiceError as exc:
        raise to_http_error(exc) from exc

    background_tasks.add_task(dispatcher.dispatch, page.side_effects)
    return ListResponse.of(page.items)


@router.post("", response_model=DataResponse[PostView], status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> DataResponse[PostView]:
    """Create a top-level post, optionally listing a product."""
    post = engagement.create_post(db, current_user, payload)
    db.commit()
    return DataResponse(data=project_single(db, current_user.id, post))


@router.get("/{post_id}", response_model=DataResponse[PostDetail])
async def get_post(
    post_id: str,
    db: SessionDep,
    viewer_id: ViewerDep,
    dispatcher: DispatcherDep,
    background_tasks: BackgroundTasks,
) -> DataResponse[PostDetail]:
    """Return a single post with its replies and record one impression for it."""
    repo = PostRepository(db)
    post = repo.get_active(post_id, with_projection=True)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    replies = repo.list_replies(post.id)
    projector = build_projector(db, viewer_id, [post, *replies])
    background_tasks.add_task(
        dispatcher.dispatch,
        impression_commands([post.id], timezone=settings.local_timezone),
    )
    return DataResponse(data=projector.project_detail(post, replies))


@router.get("/{post_id}/quotes", response_model=ListResponse[PostView])
async def list_quotes(
    post_id: str,
    db: SessionDep,
    viewer_id: ViewerDep,
    dispatcher: DispatcherDep,
    background_tasks: BackgroundTasks,
    kind: Annotated[Literal["posts", "products"], Query(alias="type")] = "posts",
    before: Annotated[str | None, Query(description="Quotes older than this post id")] = None,
) -> ListResponse[PostView]:
    """Return posts quoting ``post_id``, oldest of the page first.

    Each rendered quote counts as one impression, as on the timeline.
    """
    repo = PostRepository(db)
    if repo.get_active(post_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    anchor = None
    if before:
        cursor_post = db.get(Post, before)
        if cursor_post is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Cursor {before!r} not found",
            )
        anchor = CursorAnchor(before, ensure_utc(cursor_post.created_at))

    quotes = repo.list_quotes(
        post_id,
        limit=settings.timeline_page_size,
        before=anchor,
        products_only=kind == "products",
    )
    quotes.reverse()
    projector = build_projector(db, viewer_id, quotes)
    background_tasks.add_task(
        dispatcher.dispatch,
        impression_commands((quote.id for quote in quotes), timezone=settings.local_timezone),
    )
    return ListResponse.of([projector.project(quote) for quote in quotes])


@router.post(
    "/{post_id}/reply",
    response_model=DataResponse[PostView],
    status_code=status.HTTP_201_CREATED,
)
async def reply_to_post(
    post_id: str,
    payload: ReplyCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> DataResponse[PostView]:
    try:
        reply = engagement.create_reply(db, current_user, post_id, payload)
    except ServiceError as exc:
        raise to_http_error(exc) from exc
    db.commit()
    return DataResponse(data=project_single(db, current_user.id, reply))


@router.post(
    "/{post_id}/quote",
    response_model=DataResponse[PostView],
    status_code=status.HTTP_201_CREATED,
)
async def quote_post(
    post_id: str,
    payload: QuoteCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> DataResponse[PostView]:
    try:
        quote = engagement.create_quote(db, current_user, post_id, payload)
    except ServiceError as exc:
        raise to_http_error(exc) from exc
    db.commit()
    return DataResponse(data=project_single(db, current_user.id, quote))


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> None:
    """Delete a post owned by the caller.

    Raises:
        HTTPException: 404 if the post is missing, 403 if the caller is not the author
    """
    try:
        engagement.delete_post(db, current_user, post_id)
    except ServiceError as exc:
        raise to_http_error(exc) from exc
    db.commit()
