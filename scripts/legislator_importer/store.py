"""PostgreSQL access for legislators and import locks."""

from __future__ import annotations

from datetime import timedelta

from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from .schema import (
    ACQUIRE_LOCK,
    CLEAR_STALE_LOCKS,
    CREATE_INDEXES,
    CREATE_LEGISLATORS_TABLE,
    CREATE_SYSTEM_LOCKS_TABLE,
    RELEASE_LOCK,
    UPSERT_LEGISLATOR,
    LegislatorRecord,
)


def create_pool(database_url: str, *, max_size: int) -> AsyncConnectionPool:
    """
    Build an (unopened) async connection pool.

    Each concurrent upsert in a batch takes its own connection, so max_size
    should be at least the batch size. Callers open and close the pool.
    """
    return AsyncConnectionPool(
        database_url,
        min_size=1,
        max_size=max_size,
        kwargs={"row_factory": dict_row, "autocommit": True},
        open=False,
    )


class LegislatorStore:
    """Thin async wrapper over the legislators and system_locks tables."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self.pool = pool

    async def create_schema(self) -> None:
        """Create tables and indexes if they do not already exist."""
        async with self.pool.connection() as conn:
            await conn.execute(CREATE_LEGISLATORS_TABLE)
            await conn.execute(CREATE_SYSTEM_LOCKS_TABLE)
            for statement in CREATE_INDEXES:
                await conn.execute(statement)

    async def ping(self) -> bool:
        async with self.pool.connection() as conn:
            cur = await conn.execute("SELECT 1 AS ok")
            row = await cur.fetchone()
            return bool(row and row["ok"] == 1)

    async def upsert_legislator(self, record: LegislatorRecord) -> bool:
        """
        Insert or overwrite a legislator keyed on bioguide_id.

        Returns:
            True if a new row was inserted, False if an existing row was updated
        """
        async with self.pool.connection() as conn:
            cur = await conn.execute(UPSERT_LEGISLATOR, record.as_params())
            row = await cur.fetchone()
            return bool(row["inserted"])

    async def try_insert_lock(self, lock_key: str) -> bool:
        """Insert the lock row if absent. Returns True if this call created it."""
        async with self.pool.connection() as conn:
            cur = await conn.execute(ACQUIRE_LOCK, (lock_key,))
            return await cur.fetchone() is not None

    async def delete_lock(self, lock_key: str) -> int:
        async with self.pool.connection() as conn:
            cur = await conn.execute(RELEASE_LOCK, (lock_key,))
            return cur.rowcount

    async def delete_stale_locks(self, older_than: timedelta) -> list[str]:
        """Delete lock rows acquired more than `older_than` ago."""
        async with self.pool.connection() as conn:
            cur = await conn.execute(CLEAR_STALE_LOCKS, (older_than,))
            rows = await cur.fetchall()
            return [row["lock_key"] for row in rows]
