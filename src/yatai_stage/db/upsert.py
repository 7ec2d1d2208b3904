"""Dialect-aware ``INSERT .. ON CONFLICT`` helpers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import Table
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


def upsert(
    session: Session,
    table: Table,
    values: Mapping[str, Any],
    *,
    conflict_columns: Sequence[str],
    update: Mapping[str, Any],
) -> None:
    """Insert ``values`` or apply ``update`` to the conflicting row in one statement.

    ``update`` values may be SQL expressions over ``table.c`` so counters are
    incremented by the database rather than read and written back.
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(table)
    elif dialect == "sqlite":
        stmt = sqlite.insert(table)
    else:
        raise NotImplementedError(f"Upsert is not supported for dialect {dialect!r}")

    stmt = stmt.values(**values).on_conflict_do_update(
        index_elements=list(conflict_columns),
        set_=dict(update),
    )
    session.execute(stmt)
