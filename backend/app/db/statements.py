"""
Atomic conditional writes.

Both helpers compile to a single ``INSERT … ON CONFLICT`` statement, so a
uniqueness invariant holds even when two identical requests race.
"""
from typing import Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

_INSERT_BY_DIALECT = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _dialect_insert(db: Session, model: type):
    dialect = db.get_bind().dialect.name
    try:
        return _INSERT_BY_DIALECT[dialect](model)
    except KeyError:
        raise NotImplementedError(f"ON CONFLICT writes are not supported on {dialect}") from None


def insert_if_absent(
    db: Session,
    model: type,
    values: dict[str, Any],
    index_elements: list[str],
) -> bool:
    """Insert *values* unless the key already exists. Returns True when a row was written."""
    stmt = (
        _dialect_insert(db, model)
        .values(**values)
        .on_conflict_do_nothing(index_elements=index_elements)
    )
    result = db.execute(stmt)
    return result.rowcount == 1


def upsert(
    db: Session,
    model: type,
    values: dict[str, Any],
    index_elements: list[str],
    update_columns: list[str],
) -> None:
    """Insert *values*, or overwrite *update_columns* on the row sharing the key."""
    stmt = _dialect_insert(db, model).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=index_elements,
        set_={column: stmt.excluded[column] for column in update_columns},
    )
    db.execute(stmt)
