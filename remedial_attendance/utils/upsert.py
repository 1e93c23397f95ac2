"""
Dialect specific INSERT variants used for idempotent writes.

SQLite and PostgreSQL use ``ON CONFLICT``; MySQL uses ``INSERT IGNORE`` and
``ON DUPLICATE KEY UPDATE``.
"""
from typing import Any, Dict, Sequence

from sqlalchemy import Table
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
    "mysql": mysql.insert,
    "mariadb": mysql.insert,
}


def _dialect_insert(db: AsyncSession, table: Table):
    dialect = db.get_bind().dialect.name
    try:
        return dialect, _INSERTS[dialect](table)
    except KeyError:
        raise ValueError(f"Upserts are not supported on the {dialect} dialect")


async def insert_ignore(db: AsyncSession, table: Table, values: Dict[str, Any]) -> int:
    """Insert a row unless it violates a unique constraint. Returns the number of rows inserted."""
    dialect, stmt = _dialect_insert(db, table)
    stmt = stmt.values(**values)
    if dialect in ("mysql", "mariadb"):
        stmt = stmt.prefix_with("IGNORE")
    else:
        stmt = stmt.on_conflict_do_nothing()
    result = await db.execute(stmt)
    return result.rowcount or 0


async def upsert(
    db: AsyncSession,
    table: Table,
    values: Dict[str, Any],
    conflict_columns: Sequence[str],
    update_values: Dict[str, Any],
) -> None:
    """Insert a row, or update ``update_values`` on the row that owns the same ``conflict_columns``."""
    dialect, stmt = _dialect_insert(db, table)
    stmt = stmt.values(**values)
    if dialect in ("mysql", "mariadb"):
        stmt = stmt.on_duplicate_key_update(**update_values)
    else:
        stmt = stmt.on_conflict_do_update(index_elements=list(conflict_columns), set_=update_values)
    await db.execute(stmt)
