"""Database connection utilities."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite


class Database:
    """Async SQLite database wrapper.

    The connection runs in autocommit mode; multi-statement work goes through
    transaction() (writes) or snapshot() (consistent reads), which are
    serialized on the shared connection.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._connection: aiosqlite.Connection | None = None
        self._tx_lock = asyncio.Lock()

    async def connect(self) -> None:
        if self._connection is not None:
            return
        self._connection = await aiosqlite.connect(self.db_path, isolation_level=None)
        await self._connection.execute("PRAGMA foreign_keys = ON")
        await self._init_schema()

    async def _init_schema(self) -> None:
        schema_path = Path(__file__).parent / "schema.sql"
        schema = schema_path.read_text(encoding="utf-8")
        await self._connection.executescript(schema)

    async def execute_read(self, query: str, params=None):
        """Execute a read query and return all results."""
        async with self._connection.execute(query, params or []) as cursor:
            return await cursor.fetchall()

    async def execute_write(self, query: str, params=None) -> int:
        """Execute a single autocommitted write and return lastrowid."""
        async with self._connection.execute(query, params or []) as cursor:
            return cursor.lastrowid

    async def executemany(self, query: str, params: Iterable[Sequence]) -> None:
        await self._connection.executemany(query, params)

    # =========================================================================
    # Transaction support for atomic mutations and consistent reads
    # =========================================================================

    @asynccontextmanager
    async def transaction(self):
        """Context manager for an atomic write transaction.

        Opens BEGIN IMMEDIATE so the write lock is taken before the current
        rows are read: read with intent to update, validate, write.

        Usage:
            async with db.transaction():
                rows = await db.execute_read(...)
                await db.execute_write_no_commit(...)
            # Commits on exit, rolls back on exception
        """
        async with self._tx_lock:
            await self._connection.execute("BEGIN IMMEDIATE")
            try:
                yield
                await self._connection.execute("COMMIT")
            except BaseException:
                await self._connection.execute("ROLLBACK")
                raise

    @asynccontextmanager
    async def snapshot(self):
        """Context manager for a read-only transaction.

        Every read inside the block observes the same committed state.
        """
        async with self._tx_lock:
            await self._connection.execute("BEGIN")
            try:
                yield
            finally:
                await self._connection.execute("ROLLBACK")

    async def execute_write_no_commit(self, query: str, params=None) -> int:
        """Execute write inside transaction() and return lastrowid."""
        async with self._connection.execute(query, params or []) as cursor:
            return cursor.lastrowid

    async def close(self) -> None:
        if self._connection:
            await self._connection.close()
            self._connection = None
