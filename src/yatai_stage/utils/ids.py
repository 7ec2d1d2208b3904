"""Identifier helpers."""

from uuid import uuid4


def new_id() -> str:
    """Return a random identifier shared by every addressable entity.

    Posts and reposts draw from the same id space so a timeline cursor can
    reference either without a type tag.
    """
    return str(uuid4())
