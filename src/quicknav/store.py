"""SQLite timestamp store.

Holds the global invalidation mark and, per principal, the cached index and
the time it was built. Every write is a full overwrite (``INSERT OR
REPLACE``), so concurrent rebuilds of the same principal settle on whichever
write lands last.

Unlike a best-effort cache, a store failure here is fatal for the request:
``aiosqlite.Error`` is wrapped into ``QuickNavError(STORE_UNAVAILABLE)`` and
propagated. Nothing is retried.
"""

from __future__ import annotations

import aiosqlite
import structlog
from pydantic import TypeAdapter

from quicknav.errors import ErrorCode, QuickNavError
from quicknav.models.content import ContentRecord, PrincipalIndex

log = structlog.get_logger()

GLOBAL_MARK_KEY = "content_index_expiration_timestamp"

_ITEMS_ADAPTER = TypeAdapter(list[ContentRecord])

_CREATE_OPTIONS_TABLE = """
CREATE TABLE IF NOT EXISTS site_options (
    key   TEXT PRIMARY KEY,
    value INTEGER NOT NULL
)
"""

_CREATE_INDEX_TABLE = """
CREATE TABLE IF NOT EXISTS principal_index (
    principal_id TEXT PRIMARY KEY,
    items        TEXT NOT NULL,
    built_at     INTEGER NOT NULL
)
"""


def _unavailable(operation: str, exc: aiosqlite.Error) -> QuickNavError:
    return QuickNavError(
        code=ErrorCode.STORE_UNAVAILABLE,
        message=f"Timestamp store {operation} failed: {exc}",
        suggestion="Check that the index database is reachable and writable.",
        recoverable=True,
    )


class TimestampStore:
    """SQLite-backed store implementing TimestampStoreProtocol."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def init_db(self) -> None:
        """Create tables and set WAL mode. Called once at startup."""
        await self._db.execute("PRAGMA journal_mode = WAL")
        await self._db.execute(_CREATE_OPTIONS_TABLE)
        await self._db.execute(_CREATE_INDEX_TABLE)
        await self._db.commit()

    # ------------------------------------------------------------------
    # Global invalidation mark
    # ------------------------------------------------------------------

    async def get_global_mark(self) -> int | None:
        try:
            cursor = await self._db.execute(
                "SELECT value FROM site_options WHERE key = ?", (GLOBAL_MARK_KEY,)
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise _unavailable("read", exc) from exc
        return None if row is None else int(row[0])

    async def set_global_mark(self, timestamp: int) -> None:
        try:
            await self._db.execute(
                "INSERT OR REPLACE INTO site_options (key, value) VALUES (?, ?)",
                (GLOBAL_MARK_KEY, timestamp),
            )
            await self._db.commit()
        except aiosqlite.Error as exc:
            raise _unavailable("write", exc) from exc

    # ------------------------------------------------------------------
    # Per-principal index
    # ------------------------------------------------------------------

    async def get_principal_build_time(self, principal_id: str) -> int | None:
        try:
            cursor = await self._db.execute(
                "SELECT built_at FROM principal_index WHERE principal_id = ?",
                (principal_id,),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise _unavailable("read", exc) from exc
        return None if row is None else int(row[0])

    async def get_principal_index(self, principal_id: str) -> PrincipalIndex | None:
        try:
            cursor = await self._db.execute(
                "SELECT items, built_at FROM principal_index WHERE principal_id = ?",
                (principal_id,),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise _unavailable("read", exc) from exc
        if row is None:
            return None
        return PrincipalIndex(
            items=_ITEMS_ADAPTER.validate_json(row[0]),
            built_at=int(row[1]),
        )

    async def set_principal_index(self, principal_id: str, index: PrincipalIndex) -> None:
        try:
            await self._db.execute(
                "INSERT OR REPLACE INTO principal_index (principal_id, items, built_at) "
                "VALUES (?, ?, ?)",
                (
                    principal_id,
                    _ITEMS_ADAPTER.dump_json(index.items).decode("utf-8"),
                    index.built_at,
                ),
            )
            await self._db.commit()
        except aiosqlite.Error as exc:
            raise _unavailable("write", exc) from exc
        log.debug(
            "principal_index_stored",
            principal_id=principal_id,
            item_count=len(index.items),
            built_at=index.built_at,
        )
