"""Protocol interfaces for swappable components.

The index core references these protocols, not the concrete
implementations. This allows:
- Tests to use lightweight in-memory implementations
- Other host platforms to plug in their own content source
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from quicknav.models.content import ContentQuery, PrincipalIndex, RawContentItem


class TimestampStoreProtocol(Protocol):
    """Interface for the invalidation mark and per-principal index storage."""

    async def get_global_mark(self) -> int | None: ...

    async def set_global_mark(self, timestamp: int) -> None: ...

    async def get_principal_build_time(self, principal_id: str) -> int | None: ...

    async def get_principal_index(self, principal_id: str) -> PrincipalIndex | None: ...

    async def set_principal_index(self, principal_id: str, index: PrincipalIndex) -> None: ...


class ContentSourceProtocol(Protocol):
    """Interface for the host platform's content listing and authorization."""

    async def list_content(self, query: ContentQuery) -> list[RawContentItem]: ...

    async def can_view(self, principal_id: str, item_id: int) -> bool: ...

    async def can_read(self, principal_id: str) -> bool: ...

    def edit_url(self, item: RawContentItem) -> str: ...
