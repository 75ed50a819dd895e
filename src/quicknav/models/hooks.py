from __future__ import annotations

from pydantic import BaseModel, Field


class ContentSnapshot(BaseModel):
    """The state of a content item on one side of an update."""

    id: int | None = None
    title: str = ""


class ContentUpdatedEvent(BaseModel):
    before: ContentSnapshot
    after: ContentSnapshot


class StatusTransitionEvent(BaseModel):
    old_status: str = Field(min_length=1)
    new_status: str = Field(min_length=1)
    item_id: int | None = None
