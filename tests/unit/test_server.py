"""Unit tests for the server lifespan."""

from __future__ import annotations

from typing import TYPE_CHECKING

import aiosqlite
import pytest
from starlette.applications import Starlette

from quicknav import server
from quicknav.config import Settings

if TYPE_CHECKING:
    from pathlib import Path


async def test_index_db_closed_when_content_db_fails(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    opened: list[aiosqlite.Connection] = []
    real_connect = aiosqlite.connect

    def recording_connect(*args: object, **kwargs: object) -> aiosqlite.Connection:
        conn = real_connect(*args, **kwargs)
        opened.append(conn)
        return conn

    monkeypatch.setattr(server.aiosqlite, "connect", recording_connect)
    settings = Settings(
        store={"db_path": str(tmp_path / "index.db")},
        source={"db_path": str(tmp_path / "missing" / "content.db")},
    )

    with pytest.raises(aiosqlite.OperationalError):
        async with server._make_lifespan(settings)(Starlette()):
            pass

    assert len(opened) == 2
    with pytest.raises(ValueError):
        await opened[0].execute("SELECT 1")


async def test_lifespan_sets_app_state(tmp_path: Path) -> None:
    content_path = tmp_path / "content.db"
    async with aiosqlite.connect(str(content_path)) as db:
        await db.execute("CREATE TABLE content_items (id INTEGER PRIMARY KEY)")
        await db.commit()
    settings = Settings(
        store={"db_path": str(tmp_path / "index" / "index.db")},
        source={"db_path": str(content_path)},
    )
    app = Starlette()

    async with server._make_lifespan(settings)(app):
        assert app.state.quicknav.settings is settings

    assert (tmp_path / "index" / "index.db").exists()
