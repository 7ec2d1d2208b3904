"""Impression accounting as detached side-effect commands.

Read paths never write counters themselves. They return
:class:`IncrementImpression` commands alongside their payload and the API
layer hands those to a :class:`SideEffectDispatcher` that runs after the
response is sent. Dispatch failures are logged and dropped.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from yatai_stage.db.time import local_date_key, utcnow
from yatai_stage.db.upsert import upsert
from yatai_stage.models import DailyPostImpression, Post

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractContextManager[Session]]


@dataclass(frozen=True)
class IncrementImpression:
    """Add ``amount`` views to ``post_id`` for the local day ``date_key``."""

    post_id: str
    date_key: str
    amount: int = 1


def impression_commands(
    post_ids: Iterable[str],
    *,
    timezone: str,
    now: datetime | None = None,
) -> list[IncrementImpression]:
    """Return one command per distinct post, counting each rendering once."""
    date_key = local_date_key(now or utcnow(), timezone)
    counts = Counter(post_ids)
    return [
        IncrementImpression(post_id=post_id, date_key=date_key, amount=amount)
        for post_id, amount in counts.items()
    ]


def apply_increment(session: Session, command: IncrementImpression) -> None:
    """Atomically add to the counter row, creating it on first view."""
    table = DailyPostImpression.__table__
    upsert(
        session,
        table,
        {
            "post_id": command.post_id,
            "date_key": command.date_key,
            "impression": command.amount,
        },
        conflict_columns=("post_id", "date_key"),
        update={"impression": table.c.impression + command.amount},
    )


class SideEffectDispatcher:
    """Executes side-effect commands in their own session, swallowing failures."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def dispatch(self, commands: Sequence[IncrementImpression]) -> None:
        if not commands:
            return
        try:
            with self._session_factory() as session:
                for command in commands:
                    apply_increment(session, command)
                session.commit()
        except Exception:  # noqa: BLE001 - impressions must never fail a request
            logger.exception(
                "Dropped %d impression increment(s) for posts %s",
                len(commands),
                [command.post_id for command in commands],
            )


def impressions_by_day(session: Session, author_id: str, divisor: int = 1) -> dict[str, int]:
    """Sum impressions of an author's posts per local day.

    ``divisor`` scales raw counts for parity with historical reports; the
    result is floored.
    """
    rows = session.execute(
        select(DailyPostImpression.date_key, func.sum(DailyPostImpression.impression))
        .join(Post, Post.id == DailyPostImpression.post_id)
        .where(Post.user_id == author_id)
        .group_by(DailyPostImpression.date_key)
        .order_by(DailyPostImpression.date_key)
    )
    return {date_key: int(total or 0) // divisor for date_key, total in rows}
