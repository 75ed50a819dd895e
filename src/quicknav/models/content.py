from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RawContentItem(BaseModel):
    """A content item as listed by the host content source."""

    id: int
    title: str = ""
    type: str  # Host content kind, e.g. "post", "page"
    status: str
    created_at: datetime


class ContentQuery(BaseModel):
    """Listing parameters handed to the content source. Order is always newest first."""

    limit: int = Field(default=500, ge=1)
    post_types: list[str] | None = None  # None means any type
    statuses: list[str] | None = None  # None means any status


class ContentRecord(BaseModel):
    """One entry in a principal's navigation index."""

    model_config = ConfigDict(frozen=True)

    title: str  # HTML-escaped
    type: str
    url: str


class PrincipalIndex(BaseModel):
    """The cached index of a single principal."""

    items: list[ContentRecord] = Field(default_factory=list)
    built_at: int  # Epoch seconds at build completion, plus one
