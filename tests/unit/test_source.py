"""Unit tests for quicknav.source."""

from __future__ import annotations

import aiosqlite
import pytest
from fakes import make_item, seed_content

from quicknav.errors import ErrorCode, QuickNavError
from quicknav.models.content import ContentQuery
from quicknav.source import EDIT_OTHERS_CAPABILITY, READ_CAPABILITY, SqliteContentSource

_ITEMS = [
    (1, "Oldest post", "post", "publish", "alice"),
    (2, "About", "page", "publish", "bob"),
    (3, "Draft idea", "post", "draft", "bob"),
    (4, "Pricing", "page", "publish", "carol"),
    (5, "Newest post", "post", "publish", "carol"),
]


@pytest.fixture()
async def source(content_db: aiosqlite.Connection) -> SqliteContentSource:
    await seed_content(
        content_db,
        _ITEMS,
        grants=[("alice", 4)],
        capabilities=[
            ("alice", READ_CAPABILITY),
            ("bob", READ_CAPABILITY),
            ("editor", READ_CAPABILITY),
            ("editor", EDIT_OTHERS_CAPABILITY),
        ],
    )
    return SqliteContentSource(content_db, "/admin/{type}/{id}/edit")


class TestListContent:
    async def test_newest_first(self, source: SqliteContentSource) -> None:
        items = await source.list_content(ContentQuery())
        assert [item.id for item in items] == [5, 4, 3, 2, 1]

    async def test_limit(self, source: SqliteContentSource) -> None:
        items = await source.list_content(ContentQuery(limit=2))
        assert [item.id for item in items] == [5, 4]

    async def test_type_filter(self, source: SqliteContentSource) -> None:
        items = await source.list_content(ContentQuery(post_types=["page"]))
        assert [item.id for item in items] == [4, 2]

    async def test_status_filter(self, source: SqliteContentSource) -> None:
        items = await source.list_content(ContentQuery(statuses=["draft"]))
        assert [item.title for item in items] == ["Draft idea"]

    async def test_mixed_utc_offsets_sort_by_instant(
        self, content_db: aiosqlite.Connection
    ) -> None:
        await content_db.executemany(
            "INSERT INTO content_items (id, title, type, status, author_id, created_at) "
            "VALUES (?, ?, 'post', 'publish', 'alice', ?)",
            [
                (1, "Berlin morning", "2026-03-01T10:00:00+02:00"),  # 08:00 UTC
                (2, "London morning", "2026-03-01T09:00:00+00:00"),
                (3, "Tokyo evening", "2026-03-01T17:30:00+09:00"),  # 08:30 UTC
            ],
        )
        await content_db.commit()
        source = SqliteContentSource(content_db, "/edit/{id}")
        items = await source.list_content(ContentQuery())
        assert [item.title for item in items] == [
            "London morning",
            "Tokyo evening",
            "Berlin morning",
        ]

    async def test_empty_database(self, content_db: aiosqlite.Connection) -> None:
        source = SqliteContentSource(content_db, "/edit/{id}")
        assert await source.list_content(ContentQuery()) == []

    async def test_failure_propagates(self, source: SqliteContentSource) -> None:
        await source._db.execute("DROP TABLE content_items")
        with pytest.raises(QuickNavError) as exc_info:
            await source.list_content(ContentQuery())
        assert exc_info.value.code == ErrorCode.CONTENT_SOURCE_UNAVAILABLE


class TestAuthorization:
    async def test_author_can_view(self, source: SqliteContentSource) -> None:
        assert await source.can_view("alice", 1) is True

    async def test_grant_allows_view(self, source: SqliteContentSource) -> None:
        assert await source.can_view("alice", 4) is True

    async def test_other_authors_hidden(self, source: SqliteContentSource) -> None:
        assert await source.can_view("alice", 5) is False

    async def test_edit_others_sees_everything(self, source: SqliteContentSource) -> None:
        for item_id, *_ in _ITEMS:
            assert await source.can_view("editor", item_id) is True

    async def test_unknown_item(self, source: SqliteContentSource) -> None:
        assert await source.can_view("editor", 999) is False

    async def test_can_read(self, source: SqliteContentSource) -> None:
        assert await source.can_read("bob") is True
        assert await source.can_read("carol") is False


async def test_edit_url_template(content_db: aiosqlite.Connection) -> None:
    source = SqliteContentSource(content_db, "/admin/{type}/{id}/edit")
    assert source.edit_url(make_item(42, type_="page")) == "/admin/page/42/edit"
