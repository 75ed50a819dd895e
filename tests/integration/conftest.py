"""Integration test fixtures.

Provides the Starlette app wired to an in-memory index database, a seeded
in-memory host content database and a pinned clock, plus an httpx client
talking to it over ASGI. Store and clock fixtures come from tests/conftest.py.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest
from fakes import API_PREFIX, seed_content

from quicknav.api import create_app
from quicknav.config import Settings
from quicknav.source import EDIT_OTHERS_CAPABILITY, READ_CAPABILITY, SqliteContentSource
from quicknav.state import AppState, build_app_state

if TYPE_CHECKING:
    import aiosqlite
    from fakes import FakeClock

    from quicknav.store import TimestampStore


@pytest.fixture()
async def app_state(
    content_db: aiosqlite.Connection, store: TimestampStore, clock: FakeClock
) -> AppState:
    await seed_content(
        content_db,
        [
            (1, "Welcome", "post", "publish", "alice"),
            (2, "Team & Culture", "page", "publish", "bob"),
            (3, "Roadmap", "post", "draft", "bob"),
        ],
        capabilities=[
            ("alice", READ_CAPABILITY),
            ("bob", READ_CAPABILITY),
            ("editor", READ_CAPABILITY),
            ("editor", EDIT_OTHERS_CAPABILITY),
        ],
    )
    settings = Settings(server={"root_url": "https://cms.example.com/api"})
    source = SqliteContentSource(content_db, "/admin/content/{id}/edit")
    return build_app_state(settings, store, source, clock=clock)


@pytest.fixture()
async def client(app_state: AppState) -> httpx.AsyncClient:
    app = create_app(state=app_state, api_prefix=API_PREFIX)
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://localhost",
    ) as client:
        yield client
