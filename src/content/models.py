"""Content domain models — pure Pydantic v2 data types.

These are the four record kinds the studio persists: drafts being
written, themes that style them, icons that can be dropped into them,
and the articles that have been published. Python attributes are
snake_case; the stored JSON keeps the camelCase keys the browser app
has always written.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


class ColorMode(StrEnum):
    """How an icon is recolored."""

    MAIN = "main"  # prefer stroke, fall back to fill
    FILL = "fill"  # force interior fill


class _Record(BaseModel):
    """Shared config: accept both field names and stored aliases, keep extras."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    def to_store(self) -> dict[str, object]:
        """Dump to the JSON-compatible dict written to the store."""
        return self.model_dump(mode="json", by_alias=True)


class Draft(_Record):
    """An unpublished article body with derived title and timestamps."""

    id: str
    title: str = ""
    content: str = ""
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")


class Theme(_Record):
    """A named set of style-variable overrides."""

    id: str
    name: str
    is_system_theme: bool = Field(default=False, alias="isSystemTheme")
    styles: dict[str, str] = Field(default_factory=dict)


class Icon(_Record):
    """An SVG icon with its pristine source kept for recoloring."""

    id: str
    name: str
    svg: str
    original_svg: str | None = Field(default=None, alias="originalSvg")
    color: str | None = None
    color_mode: ColorMode = Field(default=ColorMode.MAIN, alias="colorMode")


class PublishedArticle(_Record):
    """Snapshot of a draft at publication time."""

    id: str
    original_draft_id: str | None = Field(default=None, alias="originalDraftId")
    title: str = ""
    content: str = ""
    published_at: datetime = Field(default_factory=utcnow, alias="publishedAt")
    theme_id: str | None = Field(default=None, alias="themeId")
