# mypy: ignore-errors
# tests/v1/test_users.py
"""Tests for profile timelines and follow endpoints."""

import pytest
from fastapi import status

from yatai_stage.models import Follow


@pytest.fixture()
def alice(make_user):
    return make_user("alice")


@pytest.fixture()
def bob(make_user):
    return make_user("bob")


class TestProfileTimeline:
    def test_lists_own_posts_and_reposts(self, client, alice, bob, make_post, make_repost) -> None:
        own = make_post(alice, 10, post_id="alice-1")
        bobs = make_post(bob, 20, post_id="bob-1")
        make_post(alice, 30, post_id="alice-reply", replied_id=bobs.id)
        make_repost(alice, bobs, 40, repost_id="alice-repost")
        make_repost(bob, own, 50, repost_id="bob-repost")

        response = client.get("/api/v1/users/alice/posts")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert [item["id"] for item in data] == ["alice-1", "alice-repost"]
        assert data[1]["actor"]["username"] == "alice"
        assert data[1]["post"]["author"]["username"] == "bob"

    def test_paginates_with_cursor(self, client, alice, make_post) -> None:
        for n in range(1, 4):
            make_post(alice, n * 10, post_id=f"a{n}")

        response = client.get("/api/v1/users/alice/posts", params={"before": "a3"})
        assert [item["id"] for item in response.json()["data"]] == ["a2", "a1"]

    def test_unknown_user(self, client) -> None:
        response = client.get("/api/v1/users/ghost/posts")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"success": False, "error": "User not found"}

    def test_deactivated_user(self, client, make_user) -> None:
        make_user("gone", is_active=False)
        response = client.get("/api/v1/users/gone/posts")
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestFollow:
    def test_follow_and_unfollow(self, client, login, db_session, alice, bob) -> None:
        login(alice)
        response = client.post("/api/v1/users/bob/follow")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"] == {"username": "bob", "following": True}
        assert db_session.get(Follow, (alice.id, bob.id)) is not None

        response = client.delete("/api/v1/users/bob/follow")
        assert response.json()["data"] == {"username": "bob", "following": False}
        assert db_session.get(Follow, (alice.id, bob.id)) is None

    def test_follow_changes_following_timeline(self, client, login, alice, bob, make_post) -> None:
        make_post(bob, 10, post_id="bob-1")
        login(alice)
        assert client.get("/api/v1/posts", params={"tagName": "following"}).json()["data"] == []

        client.post("/api/v1/users/bob/follow")
        data = client.get("/api/v1/posts", params={"tagName": "following"}).json()["data"]
        assert [item["id"] for item in data] == ["bob-1"]

    def test_cannot_follow_self(self, client, login, alice) -> None:
        login(alice)
        response = client.post("/api/v1/users/alice/follow")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_duplicate_follow(self, client, login, alice, bob) -> None:
        login(alice)
        client.post("/api/v1/users/bob/follow")
        response = client.post("/api/v1/users/bob/follow")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unfollow_without_follow(self, client, login, alice, bob) -> None:
        login(alice)
        response = client.delete("/api/v1/users/bob/follow")
        assert response.status_code == status.HTTP_400_BAD_REQUEST
