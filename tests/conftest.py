"""Shared test fixtures for the quicknav test suite."""

from __future__ import annotations

import aiosqlite
import pytest
from fakes import FakeClock, FakeContentSource, make_item

from quicknav.config import Settings
from quicknav.source import CONTENT_SCHEMA
from quicknav.state import AppState, build_app_state
from quicknav.store import TimestampStore


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def fake_source() -> FakeContentSource:
    """Five items; alice sees all of them, bob only items 2 and 4."""
    source = FakeContentSource([make_item(i) for i in range(1, 6)])
    source.visible["alice"] = {1, 2, 3, 4, 5}
    source.visible["bob"] = {2, 4}
    source.readers = {"alice", "bob"}
    return source


@pytest.fixture()
async def store() -> TimestampStore:
    async with aiosqlite.connect(":memory:") as db:
        store = TimestampStore(db)
        await store.init_db()
        yield store


@pytest.fixture()
async def content_db() -> aiosqlite.Connection:
    async with aiosqlite.connect(":memory:") as db:
        for statement in CONTENT_SCHEMA:
            await db.execute(statement)
        await db.commit()
        yield db


@pytest.fixture()
def settings() -> Settings:
    return Settings()


@pytest.fixture()
def core(
    settings: Settings,
    store: TimestampStore,
    fake_source: FakeContentSource,
    clock: FakeClock,
) -> AppState:
    """Index core wired around the in-memory store and fake source."""
    return build_app_state(settings, store, fake_source, clock=clock)
