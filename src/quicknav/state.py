"""Application state container.

AppState is created once at server startup (inside the Starlette lifespan)
and reached by every request handler through ``request.app.state``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from quicknav.builder import IndexBuilder, query_from_settings
from quicknav.clock import epoch_seconds
from quicknav.controller import IndexCacheController
from quicknav.invalidation import InvalidationTrigger
from quicknav.staleness import StalenessOracle

if TYPE_CHECKING:
    from quicknav.clock import Clock
    from quicknav.config import Settings
    from quicknav.protocols import ContentSourceProtocol, TimestampStoreProtocol


@dataclass
class AppState:
    """Holds all shared runtime state. Passed to every request handler."""

    settings: Settings
    store: TimestampStoreProtocol
    source: ContentSourceProtocol
    controller: IndexCacheController
    trigger: InvalidationTrigger


def build_app_state(
    settings: Settings,
    store: TimestampStoreProtocol,
    source: ContentSourceProtocol,
    *,
    clock: Clock = epoch_seconds,
) -> AppState:
    """Wire the index core around a store and a content source."""
    oracle = StalenessOracle(store, clock)
    builder = IndexBuilder(source, query_from_settings(settings.index))
    controller = IndexCacheController(store, oracle, builder, clock)
    trigger = InvalidationTrigger(
        store,
        controller,
        placeholder_status=settings.index.placeholder_status,
        clock=clock,
    )
    return AppState(
        settings=settings,
        store=store,
        source=source,
        controller=controller,
        trigger=trigger,
    )
