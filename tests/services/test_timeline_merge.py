# tests/services/test_timeline_merge.py
"""Unit tests for candidate merging and filter compilation."""

from datetime import UTC, datetime, timedelta
from types import SimpleNamespace

import pytest

from yatai_stage.repositories.post_repo import Candidate
from yatai_stage.services.errors import CursorNotFoundError, UnknownScopeError
from yatai_stage.services.filters import (
    Direction,
    FeedWindow,
    ScopeKind,
    compile_filters,
    parse_scope,
    resolve_cursor,
)
from yatai_stage.services.timeline import TimelineEngine, TimelineRequest, merge_candidates

T0 = datetime(2024, 1, 1, tzinfo=UTC)


def _candidate(entry_id: str, seconds: int, kind: str = "post") -> Candidate:
    return Candidate(
        entry_id=entry_id,
        kind=kind,
        created_at=T0 + timedelta(seconds=seconds),
        actor=SimpleNamespace(),
        post=SimpleNamespace(),
    )


class TestMergeCandidates:
    def test_newest_first_with_id_tiebreak(self) -> None:
        merged = merge_candidates(
            [_candidate("b", 10), _candidate("c", 30), _candidate("a", 10, "repost")],
            Direction.BEFORE,
            10,
        )
        assert [c.entry_id for c in merged] == ["c", "a", "b"]

    def test_truncates_to_limit(self) -> None:
        merged = merge_candidates(
            [_candidate(str(n), n) for n in range(5)],
            Direction.LATEST,
            2,
        )
        assert [c.entry_id for c in merged] == ["4", "3"]

    def test_after_keeps_entries_nearest_the_cursor(self) -> None:
        merged = merge_candidates(
            [_candidate(str(n), n) for n in range(1, 6)],
            Direction.AFTER,
            2,
        )
        assert [c.entry_id for c in merged] == ["1", "2"]


class _FailingSource:
    def fetch(self, filters, limit):
        raise RuntimeError("repost store unavailable")


def test_failing_source_fails_the_page(db_session, make_user, make_post) -> None:
    """A page is never assembled from only one of the two sources."""
    make_post(make_user(), 10)
    engine = TimelineEngine(
        db_session,
        page_size=10,
        timezone="Asia/Tokyo",
        sources=[_FailingSource()],
    )
    with pytest.raises(RuntimeError):
        engine.fetch_page(TimelineRequest())


def test_page_emits_one_command_per_post(db_session, make_user, make_post, make_repost) -> None:
    author = make_user()
    post = make_post(author, 10)
    make_repost(make_user(), post, 20)

    page = TimelineEngine(db_session, page_size=10, timezone="UTC").fetch_page(TimelineRequest())

    assert [item.type for item in page.items] == ["post", "repost"]
    assert [(cmd.post_id, cmd.amount) for cmd in page.side_effects] == [(post.id, 2)]


class TestScopeAndCursor:
    def test_pseudo_tags(self, db_session) -> None:
        assert parse_scope(db_session, None).kind is ScopeKind.ALL
        assert parse_scope(db_session, "latest").kind is ScopeKind.ALL
        assert parse_scope(db_session, "following").kind is ScopeKind.FOLLOWING

    def test_existing_tag_is_normalized(self, db_session, make_user, make_post) -> None:
        make_post(make_user(), 1, tags=("art",))
        scope = parse_scope(db_session, "ART")
        assert (scope.kind, scope.value) == (ScopeKind.TAG, "art")

    def test_unknown_tag(self, db_session) -> None:
        with pytest.raises(UnknownScopeError):
            parse_scope(db_session, "nope")

    def test_cursor_resolves_reposts(self, db_session, make_user, make_post, make_repost) -> None:
        repost = make_repost(make_user(), make_post(make_user(), 1), 42)
        anchor = resolve_cursor(db_session, repost.id)
        assert anchor.created_at == T0.replace(hour=3) + timedelta(seconds=42)

    def test_unknown_cursor(self, db_session) -> None:
        with pytest.raises(CursorNotFoundError):
            resolve_cursor(db_session, "missing")

    def test_compile_builds_fresh_alias(self) -> None:
        window = FeedWindow()
        first = compile_filters(window)
        second = compile_filters(window)
        assert first.repost_target is not second.repost_target
        assert len(first.posts) == len(first.reposts) == 2
