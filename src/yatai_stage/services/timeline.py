"""Timeline assembly: merge posts and reposts into one paginated feed.

Posts and reposts are fetched by two independent queries that share the
same cursor and scope rules, each bounded to the page size. The union of
both candidate lists is ordered by effective timestamp (id breaks ties)
and truncated to the page size, keeping the entries nearest the cursor.
Because each source supplies up to a full page past the same bound, the
truncated page never skips an entry that belongs before its last item.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from operator import attrgetter

from sqlalchemy.orm import Session

from yatai_stage.repositories.post_repo import (
    Candidate,
    CandidateSource,
    PostCandidateSource,
    RepostCandidateSource,
)
from yatai_stage.schemas.timeline import FeedItem
from yatai_stage.services.filters import (
    Direction,
    FeedWindow,
    Scope,
    ScopeKind,
    compile_filters,
    parse_scope,
    resolve_cursor,
)
from yatai_stage.services.impressions import IncrementImpression, impression_commands
from yatai_stage.services.projection import build_projector
from yatai_stage.services.viewer import ANONYMOUS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimelineRequest:
    """Page request as received from the API layer.

    At most one of ``after``/``before`` may be set; the caller validates that.
    """

    viewer_id: str = ANONYMOUS
    tag_name: str | None = None
    after: str | None = None
    before: str | None = None
    live_only: bool = False
    author_id: str | None = None


@dataclass(frozen=True)
class TimelinePage:
    """Assembled page plus the side effects rendering it implies."""

    items: list[FeedItem]
    side_effects: list[IncrementImpression] = field(default_factory=list)


def merge_candidates(
    candidates: Sequence[Candidate],
    direction: Direction,
    limit: int,
) -> list[Candidate]:
    """Order candidates and keep the ``limit`` entries nearest the cursor.

    Feed order is newest first with ascending id on equal timestamps. For
    ``after`` pages the order is reversed before truncation so the kept
    entries are the ones just above the cursor.
    """
    ordered = sorted(candidates, key=attrgetter("entry_id"))
    ordered.sort(key=attrgetter("created_at"), reverse=True)
    if direction is Direction.AFTER:
        ordered.reverse()
    return ordered[:limit]


class TimelineEngine:
    """Builds timeline pages against an explicit session."""

    def __init__(
        self,
        session: Session,
        *,
        page_size: int,
        timezone: str,
        sources: Sequence[CandidateSource] | None = None,
    ) -> None:
        self.session = session
        self.page_size = page_size
        self.timezone = timezone
        self.sources: tuple[CandidateSource, ...] = tuple(
            sources
            if sources is not None
            else (PostCandidateSource(session), RepostCandidateSource(session))
        )

    def build_window(self, request: TimelineRequest) -> FeedWindow:
        """Resolve cursor and scope; raises before any candidate is fetched."""
        if request.author_id is not None:
            scope = Scope(ScopeKind.AUTHOR, request.author_id)
        else:
            scope = parse_scope(self.session, request.tag_name)

        direction = Direction.LATEST
        anchor = None
        if request.before:
            direction = Direction.BEFORE
            anchor = resolve_cursor(self.session, request.before)
        elif request.after:
            direction = Direction.AFTER
            anchor = resolve_cursor(self.session, request.after)

        return FeedWindow(
            viewer_id=request.viewer_id,
            direction=direction,
            anchor=anchor,
            scope=scope,
            live_only=request.live_only,
        )

    def fetch_page(self, request: TimelineRequest) -> TimelinePage:
        """Assemble one page.

        ``before`` pages come back newest first. ``after`` and latest pages
        come back oldest first, so a client can prepend them in order.
        """
        window = self.build_window(request)
        filters = compile_filters(window)

        candidates: list[Candidate] = []
        for source in self.sources:
            candidates.extend(source.fetch(filters, self.page_size))

        page = merge_candidates(candidates, window.direction, self.page_size)
        projector = build_projector(self.session, window.viewer_id, [c.post for c in page])
        items = [projector.feed_item(candidate) for candidate in page]
        if window.direction is Direction.LATEST:
            items.reverse()

        logger.debug(
            "Timeline page direction=%s scope=%s candidates=%d items=%d",
            window.direction,
            window.scope.kind,
            len(candidates),
            len(items),
        )
        return TimelinePage(
            items=items,
            side_effects=impression_commands(
                (item.post.id for item in items), timezone=self.timezone
            ),
        )
