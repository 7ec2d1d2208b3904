"""Per-post daily impression counters."""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from yatai_stage.db.session import Base


class DailyPostImpression(Base):
    """Number of times a post was rendered on a local calendar day."""

    __tablename__ = "daily_post_impression"

    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # YYYY-MM-DD in the configured local timezone.
    date_key: Mapped[str] = mapped_column(String(10), primary_key=True)
    impression: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
