"""Postgres query execution for the database-backed persistence.

The pool is created once by the application lifespan. When ``DATABASE_URL``
is not configured the pool stays closed and the session store is used.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import asyncpg

logger = logging.getLogger(__name__)

_pool: Optional[asyncpg.Pool] = None


@dataclass
class QueryResult:
    rows: List[Dict[str, Any]] = field(default_factory=list)
    row_count: int = 0


def is_enabled() -> bool:
    return _pool is not None


async def init_db(database_url: str, *, min_size: int = 1, max_size: int = 5) -> None:
    global _pool

    if _pool is not None:
        return

    _pool = await asyncpg.create_pool(dsn=database_url, min_size=min_size, max_size=max_size)
    logger.info("Database initialized for todo persistence")


async def close_db() -> None:
    global _pool

    if _pool is None:
        return

    await _pool.close()
    _pool = None
    logger.info("Database pool closed")


def _row_to_dict(row: Optional[asyncpg.Record]) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    return dict(row)


def _log_db_error(statement: str, args: tuple) -> None:
    summary = [type(value).__name__ for value in args]
    logger.exception("Database query failed: %s (types=%s)", statement, summary)


def parse_row_count(status: Optional[str]) -> int:
    """Extract the affected-row count from a command tag such as ``UPDATE 3``."""
    if not status:
        return 0
    last = status.split()[-1]
    return int(last) if last.isdigit() else 0


async def db_query(statement: str, *args: Any) -> QueryResult:
    if _pool is None:
        raise RuntimeError("Database pool is not initialized")

    logger.debug("Executing query: %s", statement)
    try:
        async with _pool.acquire() as conn:
            prepared = await conn.prepare(statement)
            records = await prepared.fetch(*args)
            status = prepared.get_statusmsg()
    except Exception:
        _log_db_error(statement, args)
        raise

    rows = [_row_to_dict(record) for record in records]
    return QueryResult(rows=rows, row_count=parse_row_count(status))
