"""Index cache controller: get-or-rebuild over the timestamp store."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from quicknav.clock import epoch_seconds
from quicknav.models.content import PrincipalIndex

if TYPE_CHECKING:
    from quicknav.builder import IndexBuilder
    from quicknav.clock import Clock
    from quicknav.models.content import ContentRecord
    from quicknav.protocols import TimestampStoreProtocol
    from quicknav.staleness import StalenessOracle

log = structlog.get_logger()

# Timestamps have one-second resolution and a rebuild usually lands right
# after a bump, so the two can round to the same second. Recording the build
# one second late keeps it strictly newer than that bump.
BUILD_TIMESTAMP_BIAS = 1


class IndexCacheController:
    """Serves each principal's cached index, rebuilding it when stale.

    There is no locking: two concurrent misses for the same principal both
    rebuild and the later write wins.
    """

    def __init__(
        self,
        store: TimestampStoreProtocol,
        oracle: StalenessOracle,
        builder: IndexBuilder,
        clock: Clock = epoch_seconds,
    ) -> None:
        self._store = store
        self._oracle = oracle
        self._builder = builder
        self._clock = clock

    async def get_index(self, principal_id: str) -> list[ContentRecord]:
        if not await self._oracle.is_stale(principal_id):
            cached = await self._store.get_principal_index(principal_id)
            if cached is not None:
                log.debug("index_cache_hit", principal_id=principal_id)
                return cached.items

        log.info("index_cache_miss", principal_id=principal_id)
        return await self.rebuild(principal_id)

    async def rebuild(self, principal_id: str) -> list[ContentRecord]:
        """Build a fresh index and replace the stored one wholesale."""
        items = await self._builder.build(principal_id)
        index = PrincipalIndex(items=items, built_at=self._clock() + BUILD_TIMESTAMP_BIAS)
        await self._store.set_principal_index(principal_id, index)
        log.info(
            "index_rebuilt",
            principal_id=principal_id,
            item_count=len(items),
            built_at=index.built_at,
        )
        return items

    async def get_build_timestamp(self, principal_id: str) -> int:
        """Return when the principal's index was built, building one if there is none.

        The client uses this as its cache-busting version, so it must never
        be empty.
        """
        built_at = await self._store.get_principal_build_time(principal_id)
        if built_at is None:
            await self.get_index(principal_id)
            built_at = await self._store.get_principal_build_time(principal_id)
        return built_at  # type: ignore[return-value]
