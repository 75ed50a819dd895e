"""Invalidation trigger.

Adding content or renaming it makes every principal's cached index stale.
Rather than rebuilding (or deleting) all indexes at once, one shared
timestamp records when the caches were invalidated, and each principal's
index is compared against it on their next request. See staleness.py.

Only the acting principal is rebuilt eagerly, so their own edit shows up
immediately. Everybody else rebuilds lazily.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from quicknav.clock import epoch_seconds

if TYPE_CHECKING:
    from quicknav.clock import Clock
    from quicknav.controller import IndexCacheController
    from quicknav.models.hooks import ContentSnapshot
    from quicknav.protocols import TimestampStoreProtocol

log = structlog.get_logger()

DEFAULT_PLACEHOLDER_STATUS = "auto-draft"


async def bump_global_mark(store: TimestampStoreProtocol, clock: Clock = epoch_seconds) -> int:
    """Set the global invalidation mark to now, unconditionally."""
    mark = clock()
    await store.set_global_mark(mark)
    log.info("invalidation_mark_bumped", mark=mark)
    return mark


class InvalidationTrigger:
    """Turns content mutation events into invalidation mark bumps."""

    def __init__(
        self,
        store: TimestampStoreProtocol,
        controller: IndexCacheController,
        *,
        placeholder_status: str = DEFAULT_PLACEHOLDER_STATUS,
        clock: Clock = epoch_seconds,
    ) -> None:
        self._store = store
        self._controller = controller
        self._placeholder_status = placeholder_status
        self._clock = clock

    async def bump_global_mark(self) -> int:
        return await bump_global_mark(self._store, self._clock)

    async def on_content_updated(
        self,
        before: ContentSnapshot,
        after: ContentSnapshot,
        principal_id: str,
    ) -> bool:
        """Invalidate when an update changed the title. Returns whether it did."""
        if before.title == after.title:
            log.debug("invalidation_skipped", reason="title_unchanged", item_id=after.id)
            return False
        await self._invalidate(principal_id)
        return True

    async def on_content_status_transition(
        self,
        old_status: str,
        new_status: str,
        principal_id: str,
        *,
        item_id: int | None = None,
    ) -> bool:
        """Invalidate when new content leaves the placeholder status. Returns whether it did."""
        if old_status != self._placeholder_status:
            log.debug(
                "invalidation_skipped",
                reason="not_from_placeholder",
                old_status=old_status,
                new_status=new_status,
                item_id=item_id,
            )
            return False
        log.info(
            "content_published_from_placeholder",
            old_status=old_status,
            new_status=new_status,
            item_id=item_id,
        )
        await self._invalidate(principal_id)
        return True

    async def _invalidate(self, principal_id: str) -> None:
        await self.bump_global_mark()
        await self._controller.rebuild(principal_id)
