from __future__ import annotations

from quicknav.models.content import (
    ContentQuery,
    ContentRecord,
    PrincipalIndex,
    RawContentItem,
)
from quicknav.models.hooks import (
    ContentSnapshot,
    ContentUpdatedEvent,
    StatusTransitionEvent,
)

__all__ = [
    # content
    "RawContentItem",
    "ContentQuery",
    "ContentRecord",
    "PrincipalIndex",
    # hooks
    "ContentSnapshot",
    "ContentUpdatedEvent",
    "StatusTransitionEvent",
]
