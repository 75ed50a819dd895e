"""Staleness oracle.

A principal's index is fresh only while the global invalidation mark is
strictly older than the index's ``built_at``. A tie counts as stale.
Builds record ``now + 1`` (see controller.py) so that a build finishing in
the same second as a bump still compares as newer than it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from quicknav.clock import epoch_seconds
from quicknav.invalidation import bump_global_mark

if TYPE_CHECKING:
    from quicknav.clock import Clock
    from quicknav.protocols import TimestampStoreProtocol

log = structlog.get_logger()


class StalenessOracle:
    def __init__(self, store: TimestampStoreProtocol, clock: Clock = epoch_seconds) -> None:
        self._store = store
        self._clock = clock

    async def global_mark(self) -> int:
        """Return the invalidation mark, priming it on first use.

        A missing mark means nothing was ever invalidated; initialising it
        counts as an invalidation, so every existing index becomes stale.
        """
        mark = await self._store.get_global_mark()
        if mark is None:
            log.info("invalidation_mark_missing")
            await bump_global_mark(self._store, self._clock)
            mark = await self._store.get_global_mark()
        return mark  # type: ignore[return-value]

    async def is_stale(self, principal_id: str) -> bool:
        mark = await self.global_mark()
        built_at = await self._store.get_principal_build_time(principal_id)
        if built_at is None:
            return True
        return mark >= built_at
