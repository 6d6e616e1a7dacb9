"""Whole-studio backup export and import.

A backup is one JSON document holding every collection plus the two
pointers. Importing merges it through the normal service operations, so
the same validation applies as for interactive edits; records that fail
it are skipped and counted rather than aborting the import.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from qulome import __version__
from qulome.content.models import Draft, Icon, PublishedArticle, Theme, utcnow
from qulome.drafts.services import extract_title
from qulome.errors import QulomeError, ValidationError
from qulome.studio import Studio

logger = logging.getLogger(__name__)

APP_NAME = "Qulome"


class BackupMetadata(BaseModel):
    model_config = {"populate_by_name": True}

    export_date: datetime = Field(default_factory=utcnow, alias="exportDate")
    version: str = __version__
    app_name: str = Field(default=APP_NAME, alias="appName")


class BackupBundle(BaseModel):
    """Everything the studio persists, as one document."""

    model_config = {"populate_by_name": True}

    metadata: BackupMetadata = Field(default_factory=BackupMetadata)
    themes: list[Theme] = Field(default_factory=list)
    active_theme_id: str | None = Field(default=None, alias="activeThemeId")
    drafts: list[Draft] = Field(default_factory=list)
    current_draft_id: str | None = Field(default=None, alias="currentDraftId")
    published: list[PublishedArticle] = Field(default_factory=list)
    icons: list[Icon] = Field(default_factory=list)


class ImportSummary(BaseModel):
    """Counts of records merged and skipped by ``import_data``."""

    themes: int = 0
    drafts: int = 0
    published: int = 0
    icons: int = 0
    skipped: int = 0


def export_data(studio: Studio) -> BackupBundle:
    """Collect every collection and pointer from ``studio``."""
    active = studio.themes.get_active_theme()
    return BackupBundle(
        themes=studio.themes.get_themes(),
        active_theme_id=active.id if active else None,
        drafts=studio.drafts.get_drafts(),
        current_draft_id=studio.drafts.get_current_draft_id(),
        published=studio.published.get_published(),
        icons=studio.icons.get_icons(),
    )


def write_backup(bundle: BackupBundle, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(bundle.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
    logger.info("Wrote backup to %s", path)
    return path


def read_backup(path: Path) -> BackupBundle:
    """Read a backup file.

    Raises ValidationError if the file cannot be read or is not a backup.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return BackupBundle.model_validate(data)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, PydanticValidationError) as exc:
        raise ValidationError(f"Not a readable backup: {path} ({exc})") from exc


def parse_markdown_file(text: str, filename: str, now: datetime | None = None) -> BackupBundle:
    """Wrap a Markdown file as a bundle holding one imported draft.

    The text is kept as-is; converting Markdown to markup is left to the
    editor. The title follows the same rule as every other draft and is
    derived from the text, not the file name.
    """
    now = now or utcnow()
    draft = Draft(
        id=f"imported-{int(now.timestamp() * 1000)}",
        title=extract_title(text),
        content=text,
        created_at=now,
        updated_at=now,
        isImported=True,
    )
    logger.info("Wrapped %s as draft %s", filename, draft.id)
    return BackupBundle(drafts=[draft])


def import_data(studio: Studio, bundle: BackupBundle) -> ImportSummary:
    """Merge ``bundle`` into ``studio``; existing records with the same id are replaced."""
    summary = ImportSummary()

    for theme in bundle.themes:
        try:
            studio.themes.save_theme(theme)
            summary.themes += 1
        except QulomeError as exc:
            logger.warning("Skipping theme %r: %s", theme.id, exc)
            summary.skipped += 1
    if bundle.active_theme_id and studio.themes.get_theme(bundle.active_theme_id):
        studio.themes.set_active_theme(bundle.active_theme_id)

    for draft in bundle.drafts:
        try:
            studio.drafts.save_draft(draft, touch=False)
            summary.drafts += 1
        except QulomeError as exc:
            logger.warning("Skipping draft %r: %s", draft.id, exc)
            summary.skipped += 1
    if bundle.current_draft_id and studio.drafts.get_draft(bundle.current_draft_id):
        studio.drafts.set_current_draft_id(bundle.current_draft_id)

    for article in bundle.published:
        if studio.published.add_published(article):
            summary.published += 1

    for icon in bundle.icons:
        try:
            studio.icons.save_icon(icon)
            summary.icons += 1
        except QulomeError as exc:
            logger.warning("Skipping icon %r: %s", icon.id, exc)
            summary.skipped += 1

    logger.info("Imported backup: %s", summary.model_dump())
    return summary
