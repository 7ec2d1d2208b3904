"""Profile lookup, follow edges and follower statistics."""
from __future__ import annotations

from collections import Counter

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from yatai_stage.db.time import local_date_key
from yatai_stage.models import Follow, User
from yatai_stage.services.errors import InvalidRequestError, NotFoundError

__all__ = [
    "follow_user",
    "followers_by_day",
    "get_active_user_by_username",
    "is_following",
    "unfollow_user",
]


def get_active_user_by_username(session: Session, username: str) -> User:
    """Return an active user; deactivated accounts are treated as missing."""
    user = session.scalars(
        select(User).where(User.username == username, User.is_active.is_(True))
    ).first()
    if user is None:
        raise NotFoundError("User not found")
    return user


def is_following(session: Session, follower_id: str, followee_id: str) -> bool:
    return session.get(Follow, (follower_id, followee_id)) is not None


def follow_user(session: Session, follower: User, username: str) -> User:
    followee = get_active_user_by_username(session, username)
    if followee.id == follower.id:
        raise InvalidRequestError("You cannot follow yourself")
    if is_following(session, follower.id, followee.id):
        raise InvalidRequestError("Already following this user")

    session.add(Follow(follower_id=follower.id, followee_id=followee.id))
    try:
        session.flush()
    except IntegrityError as exc:
        session.rollback()
        raise InvalidRequestError("Already following this user") from exc
    return followee


def unfollow_user(session: Session, follower: User, username: str) -> User:
    followee = get_active_user_by_username(session, username)
    result = session.execute(
        delete(Follow).where(
            Follow.follower_id == follower.id,
            Follow.followee_id == followee.id,
        )
    )
    if result.rowcount == 0:
        raise InvalidRequestError("Not following this user")
    return followee


def followers_by_day(session: Session, user_id: str, timezone: str) -> dict[str, int]:
    """Count follow edges pointing at ``user_id`` by the local day they were created."""
    created = session.scalars(select(Follow.created_at).where(Follow.followee_id == user_id))
    counts = Counter(local_date_key(moment, timezone) for moment in created)
    return dict(sorted(counts.items()))
