"""Read-only content source backed by the host platform's SQLite database.

The host owns this database; QuickNav only reads from it. Expected schema is
given by ``CONTENT_SCHEMA`` (hosts and tests create it, this module never
does).

Visibility rules mirror a simple editorial model: a principal may open an
item's edit screen when they authored it, were granted it explicitly, or
hold the ``edit_others_content`` capability.

Listing or authorization failures are wrapped into
``QuickNavError(CONTENT_SOURCE_UNAVAILABLE)`` and propagated.
"""

from __future__ import annotations

from datetime import datetime

import aiosqlite
import structlog

from quicknav.errors import ErrorCode, QuickNavError
from quicknav.models.content import ContentQuery, RawContentItem

log = structlog.get_logger()

READ_CAPABILITY = "read"
EDIT_OTHERS_CAPABILITY = "edit_others_content"

CONTENT_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS content_items (
        id         INTEGER PRIMARY KEY,
        title      TEXT NOT NULL DEFAULT '',
        type       TEXT NOT NULL,
        status     TEXT NOT NULL,
        author_id  TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS content_grants (
        principal_id TEXT NOT NULL,
        item_id      INTEGER NOT NULL,
        PRIMARY KEY (principal_id, item_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS principal_capabilities (
        principal_id TEXT NOT NULL,
        capability   TEXT NOT NULL,
        PRIMARY KEY (principal_id, capability)
    )
    """,
)


def _unavailable(exc: aiosqlite.Error) -> QuickNavError:
    return QuickNavError(
        code=ErrorCode.CONTENT_SOURCE_UNAVAILABLE,
        message=f"Content source query failed: {exc}",
        suggestion="Check that the host content database is reachable.",
        recoverable=True,
    )


def _placeholders(values: list[str]) -> str:
    return ", ".join("?" for _ in values)


class SqliteContentSource:
    """Host content database implementing ContentSourceProtocol."""

    def __init__(self, db: aiosqlite.Connection, edit_url_template: str) -> None:
        self._db = db
        self._edit_url_template = edit_url_template

    async def list_content(self, query: ContentQuery) -> list[RawContentItem]:
        """Return at most ``query.limit`` items, newest first."""
        sql = "SELECT id, title, type, status, created_at FROM content_items"
        clauses: list[str] = []
        params: list[object] = []
        if query.post_types is not None:
            clauses.append(f"type IN ({_placeholders(query.post_types)})")
            params.extend(query.post_types)
        if query.statuses is not None:
            clauses.append(f"status IN ({_placeholders(query.statuses)})")
            params.extend(query.statuses)
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        # Newer content wins when the limit cuts the listing short. julianday()
        # normalises mixed UTC offsets before comparing.
        sql += " ORDER BY julianday(created_at) DESC, id DESC LIMIT ?"
        params.append(query.limit)

        try:
            cursor = await self._db.execute(sql, params)
            rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise _unavailable(exc) from exc
        log.debug("content_listed", item_count=len(rows), limit=query.limit)

        return [
            RawContentItem(
                id=row[0],
                title=row[1],
                type=row[2],
                status=row[3],
                created_at=datetime.fromisoformat(row[4]),
            )
            for row in rows
        ]

    async def can_view(self, principal_id: str, item_id: int) -> bool:
        try:
            cursor = await self._db.execute(
                "SELECT 1 FROM content_items WHERE id = ? AND ("
                " author_id = ?"
                " OR EXISTS (SELECT 1 FROM content_grants"
                "            WHERE principal_id = ? AND item_id = content_items.id)"
                " OR EXISTS (SELECT 1 FROM principal_capabilities"
                "            WHERE principal_id = ? AND capability = ?)"
                ")",
                (item_id, principal_id, principal_id, principal_id, EDIT_OTHERS_CAPABILITY),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise _unavailable(exc) from exc
        return row is not None

    async def can_read(self, principal_id: str) -> bool:
        try:
            cursor = await self._db.execute(
                "SELECT 1 FROM principal_capabilities WHERE principal_id = ? AND capability = ?",
                (principal_id, READ_CAPABILITY),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise _unavailable(exc) from exc
        return row is not None

    def edit_url(self, item: RawContentItem) -> str:
        return self._edit_url_template.format(id=item.id, type=item.type)
