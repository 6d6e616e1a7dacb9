"""Composition root wiring the services over one storage adapter."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime

from qulome.autosave import DraftAutoSaver, TimerFactory, thread_timer
from qulome.config import QulomeConfig
from qulome.content.models import PublishedArticle, utcnow
from qulome.drafts.services import DraftService
from qulome.errors import NotFoundError
from qulome.icons.services import IconService
from qulome.publish.services import PublishService
from qulome.storage.adapter import StorageAdapter
from qulome.storage.backends import JsonFileStore, MemoryStore
from qulome.themes.services import StyleScope, ThemeService

logger = logging.getLogger(__name__)


class Studio:
    """One instance of every service, sharing a storage adapter."""

    def __init__(
        self,
        adapter: StorageAdapter,
        config: QulomeConfig | None = None,
        style_scope: StyleScope | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.config = config or QulomeConfig()
        self.adapter = adapter
        self._clock = clock
        self.drafts = DraftService(adapter, self.config, clock=clock)
        self.themes = ThemeService(adapter, self.config, style_scope=style_scope, clock=clock)
        self.icons = IconService(adapter, self.config, clock=clock)
        self.published = PublishService(adapter, self.config)

    @classmethod
    def open(cls, config: QulomeConfig | None = None) -> Studio:
        """Open the file-backed store under ``config.storage.data_dir``."""
        config = config or QulomeConfig()
        store = JsonFileStore(config.data_dir, max_bytes=config.storage.max_bytes)
        logger.debug("Opened store at %s", store.path)
        return cls(StorageAdapter(store), config)

    @classmethod
    def in_memory(cls, config: QulomeConfig | None = None) -> Studio:
        """Studio over a throwaway dict store."""
        config = config or QulomeConfig()
        return cls(StorageAdapter(MemoryStore(max_bytes=config.storage.max_bytes)), config)

    def publish_draft(self, draft_id: str) -> PublishedArticle:
        """Move a draft into the published log, styled with the active theme.

        The draft is deleted afterwards, which also repairs the current
        draft pointer if it pointed at it.

        Raises NotFoundError if the draft does not exist.
        """
        draft = self.drafts.get_draft(draft_id)
        if draft is None:
            raise NotFoundError("Draft", draft_id)
        active = self.themes.get_active_theme()
        millis = int(self._clock().timestamp() * 1000)
        article = PublishedArticle(
            id=f"pub-{millis}-{uuid.uuid4().hex[:9]}",
            original_draft_id=draft.id,
            title=draft.title,
            content=draft.content,
            published_at=self._clock(),
            theme_id=active.id if active else None,
        )
        self.published.add_published(article)
        self.drafts.delete_draft(draft.id)
        return article

    def autosaver(
        self,
        draft_id: str,
        timer_factory: TimerFactory = thread_timer,
    ) -> DraftAutoSaver:
        """Build a debounced saver for ``draft_id`` using the configured delay."""
        return DraftAutoSaver(
            self.drafts,
            draft_id,
            delay=self.config.editor.autosave_delay,
            timer_factory=timer_factory,
        )

    def heal(self) -> dict[str, int]:
        """Re-read every collection through its repair pass.

        Returns how many records each pass removed.
        """
        summary = {
            "drafts": self.drafts.reload(),
            "orphan_drafts": self.drafts.clean_orphan_drafts(),
            "themes": self.themes.init(),
            "icons": self.icons.reload(),
            "published": self.published.reload(),
        }
        logger.info("Repair summary: %s", summary)
        return summary
