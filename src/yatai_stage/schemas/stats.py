"""Creator statistics schemas."""

from pydantic import BaseModel, Field


class CreatorStats(BaseModel):
    """Per-day counters keyed by ``YYYY-MM-DD`` local date."""

    impressions: dict[str, int] = Field(default_factory=dict)
    followers: dict[str, int] = Field(default_factory=dict)


class FollowState(BaseModel):
    """Follow relation between the viewer and a profile."""

    username: str
    following: bool
