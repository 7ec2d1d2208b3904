"""Keyword search result schemas."""

from datetime import datetime
from typing import Literal

from .timeline import AuthorSummary


class UserSearchResult(AuthorSummary):
    """A matching account, with whether the viewer already follows it."""

    type: Literal["user"] = "user"
    bio: str | None = None
    created_at: datetime
    viewer_is_following: bool = False
