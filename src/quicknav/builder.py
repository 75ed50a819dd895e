"""Index builder.

Each principal gets their own index, since they can open different items.
Sharing one index would leak the existence and titles of content a
principal has no access to.

Visibility can only be decided per item, so the listing cannot be narrowed
to the principal up front. The listing is capped at ``limit`` raw items and
filtered afterwards: visible items older than the ``limit``-th raw item are
never considered. That boundary is accepted rather than paginated around.
"""

from __future__ import annotations

import html
from typing import TYPE_CHECKING

import structlog

from quicknav.models.content import ContentQuery, ContentRecord

if TYPE_CHECKING:
    from quicknav.config import IndexSettings
    from quicknav.protocols import ContentSourceProtocol

log = structlog.get_logger()


def _escape_title(title: str) -> str:
    """HTML-escape a title without double-encoding entities it already carries."""
    return html.escape(html.unescape(title))


def query_from_settings(settings: IndexSettings) -> ContentQuery:
    return ContentQuery(
        limit=settings.limit,
        post_types=settings.post_types,
        statuses=settings.statuses,
    )


class IndexBuilder:
    """Projects the principal-visible slice of the content listing into records."""

    def __init__(self, source: ContentSourceProtocol, query: ContentQuery) -> None:
        self._source = source
        self._query = query

    async def build(self, principal_id: str) -> list[ContentRecord]:
        """Return the principal's records in listing order.

        Pure read. A source failure part-way through propagates and no
        partial result escapes.
        """
        raw_items = await self._source.list_content(self._query)

        records: list[ContentRecord] = []
        for item in raw_items:
            if not await self._source.can_view(principal_id, item.id):
                continue
            records.append(
                ContentRecord(
                    title=_escape_title(item.title),
                    type=item.type,
                    url=self._source.edit_url(item),
                )
            )

        log.debug(
            "index_built",
            principal_id=principal_id,
            considered=len(raw_items),
            visible=len(records),
        )
        return records
