"""Draft collection and the current-draft pointer.

Titles are never authored directly: every create and save derives the
title from the draft's markup, so the stored title always agrees with
the content.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import datetime

from bs4 import BeautifulSoup

from qulome.config import QulomeConfig
from qulome.content.models import Draft, utcnow
from qulome.errors import ValidationError
from qulome.healer import heal_drafts, is_well_formed_id, validate_entries
from qulome.storage.adapter import SaveResult, StorageAdapter

logger = logging.getLogger(__name__)

UNTITLED_PLACEHOLDER = "无标题草稿"
TITLE_MAX_CHARS = 30
EMPTY_PARAGRAPH = "<p><br></p>"

# Values older builds wrote when clearing the pointer
_NULL_POINTERS = {"", "null", "undefined"}

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


def extract_title(content: str | None) -> str:
    """Derive a draft title from its markup.

    The first h1/h2/h3 wins if it has text. Otherwise the whole plain
    text is whitespace-collapsed and cut to 30 characters, and if that is
    empty too the untitled placeholder is used.
    """
    soup = BeautifulSoup(content or "", "html.parser")
    heading = soup.find(["h1", "h2", "h3"])
    if heading is not None:
        text = heading.get_text().strip()
        if text:
            return text
    text = _WS_RE.sub(" ", soup.get_text()).strip()
    return text[:TITLE_MAX_CHARS] or UNTITLED_PLACEHOLDER


def strip_tags(content: str) -> str:
    return _TAG_RE.sub("", content)


def is_orphan(draft: Draft) -> bool:
    """A draft with no text left once tags are stripped."""
    if draft.content == EMPTY_PARAGRAPH:
        return False
    return not strip_tags(draft.content).strip()


class DraftService:
    """Owns the drafts collection and the current-draft pointer."""

    def __init__(
        self,
        adapter: StorageAdapter,
        config: QulomeConfig | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        config = config or QulomeConfig()
        self._adapter = adapter
        self._clock = clock
        self._drafts_key = config.storage.key("drafts")
        self._pointer_key = config.storage.key("current_draft")
        self._empty_content = config.editor.empty_content
        self._drafts: list[Draft] = []
        self._drafts, _ = self._load()

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> tuple[list[Draft], int]:
        report = heal_drafts(self._adapter.load(self._drafts_key))
        drafts = validate_entries(Draft, report, "draft")
        if report.changed:
            self._drafts = drafts
            self._persist()
        return drafts, report.removed

    def _persist(self) -> SaveResult:
        result = self._adapter.save(self._drafts_key, [d.to_store() for d in self._drafts])
        if not result.success:
            logger.error("Drafts not persisted: %s", result.error)
        return result

    def _find(self, draft_id: str | None) -> Draft | None:
        for draft in self._drafts:
            if draft.id == draft_id:
                return draft
        return None

    def _new_id(self) -> str:
        base = f"draft-{int(self._clock().timestamp() * 1000)}"
        candidate, n = base, 1
        while self._find(candidate) is not None:
            candidate = f"{base}-{n}"
            n += 1
        return candidate

    def reload(self) -> int:
        """Re-read drafts from the store, repairing them.

        Returns the number of stored entries dropped as invalid.
        """
        self._drafts, removed = self._load()
        return removed

    # ── Read operations ──────────────────────────────────────────

    def get_drafts(self) -> list[Draft]:
        return [d.model_copy(deep=True) for d in self._drafts]

    def get_draft(self, draft_id: str | None) -> Draft | None:
        """Return a copy of the draft, or None if not found."""
        draft = self._find(draft_id)
        return draft.model_copy(deep=True) if draft else None

    def get_current_draft_id(self) -> str | None:
        pointer = self._adapter.load_text(self._pointer_key)
        if pointer is None or pointer.strip() in _NULL_POINTERS:
            return None
        return pointer

    # ── Write operations ─────────────────────────────────────────

    def set_current_draft_id(self, draft_id: str | None) -> None:
        self._adapter.save_text(self._pointer_key, draft_id)

    def create_draft(self, content: str = "") -> Draft:
        """Create, persist and return a new draft for ``content``."""
        now = self._clock()
        draft = Draft(
            id=self._new_id(),
            title=extract_title(content),
            content=content or "",
            created_at=now,
            updated_at=now,
        )
        self._drafts.append(draft)
        self._persist()
        logger.debug("Created draft %s (%s)", draft.id, draft.title)
        return draft.model_copy(deep=True)

    def save_draft(self, draft: Draft, touch: bool = True) -> Draft:
        """Upsert ``draft`` by id, recomputing its title from the content.

        ``updated_at`` is stamped with the current time unless ``touch`` is
        False, which a backup restore uses to keep the recorded times.

        Raises ValidationError if the draft has no usable id.
        """
        if not is_well_formed_id(draft.id):
            raise ValidationError("Draft id must be a non-empty string")
        update: dict[str, object] = {"title": extract_title(draft.content)}
        if touch:
            update["updated_at"] = self._clock()
        saved = draft.model_copy(deep=True, update=update)
        for index, existing in enumerate(self._drafts):
            if existing.id == saved.id:
                self._drafts[index] = saved
                break
        else:
            self._drafts.append(saved)
        self._persist()
        return saved.model_copy(deep=True)

    def delete_draft(self, draft_id: str) -> bool:
        """Remove a draft by id.

        If nothing matches, entries with malformed ids are purged instead
        so a corrupt record can always be removed. When the current draft
        is deleted the pointer moves to the first remaining draft, or to a
        new empty draft.

        Returns True if a draft with ``draft_id`` was removed.
        """
        remaining = [d for d in self._drafts if d.id != draft_id]
        removed = len(remaining) < len(self._drafts)
        if not removed:
            logger.warning("Draft %r not found, purging drafts with malformed ids", draft_id)
            remaining = [d for d in remaining if is_well_formed_id(d.id)]
        self._drafts = remaining
        self._persist()

        current = self.get_current_draft_id()
        if current is not None and self._find(current) is None:
            if self._drafts:
                self.set_current_draft_id(self._drafts[0].id)
            else:
                fresh = self.create_draft(self._empty_content)
                self.set_current_draft_id(fresh.id)
                logger.info("Deleted the last draft, started %s", fresh.id)
        return removed

    def clean_orphan_drafts(self) -> int:
        """Remove drafts with no text and repair the current pointer.

        Returns the number of drafts removed.
        """
        kept = [d for d in self._drafts if not is_orphan(d)]
        removed = len(self._drafts) - len(kept)
        if removed:
            self._drafts = kept
            self._persist()
            logger.info("Removed %d orphan drafts", removed)

        current = self.get_current_draft_id()
        if current is not None and self._find(current) is None:
            if self._drafts:
                self.set_current_draft_id(self._drafts[0].id)
                logger.info("Reset current draft to %s", self._drafts[0].id)
            else:
                self.set_current_draft_id(None)
                logger.info("Cleared current draft pointer")
        return removed

    def ensure_current_draft(self) -> Draft:
        """Return the current draft, starting an empty one if there is none."""
        draft = self._find(self.get_current_draft_id())
        if draft is None:
            draft = self.create_draft(self._empty_content)
            self.set_current_draft_id(draft.id)
        return draft.model_copy(deep=True)
