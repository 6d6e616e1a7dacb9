"""Append-only log of published articles."""

from __future__ import annotations

import logging

from qulome.config import QulomeConfig
from qulome.content.models import PublishedArticle
from qulome.healer import heal_published, validate_entries
from qulome.storage.adapter import SaveResult, StorageAdapter

logger = logging.getLogger(__name__)


class PublishService:
    """Owns the published-articles collection."""

    def __init__(self, adapter: StorageAdapter, config: QulomeConfig | None = None) -> None:
        config = config or QulomeConfig()
        self._adapter = adapter
        self._published_key = config.storage.key("published")
        self._published: list[PublishedArticle] = []
        self._published, _ = self._load()

    def _load(self) -> tuple[list[PublishedArticle], int]:
        report = heal_published(self._adapter.load(self._published_key))
        published = validate_entries(PublishedArticle, report, "published article")
        if report.changed:
            self._published = published
            self._persist()
        return published, report.removed

    def _persist(self) -> SaveResult:
        result = self._adapter.save(
            self._published_key,
            [a.to_store() for a in self._published],
        )
        if not result.success:
            logger.error("Published articles not persisted: %s", result.error)
        return result

    def reload(self) -> int:
        """Re-read the log from the store, repairing it.

        Returns the number of stored entries dropped as invalid.
        """
        self._published, removed = self._load()
        return removed

    def get_published(self) -> list[PublishedArticle]:
        return [a.model_copy(deep=True) for a in self._published]

    def get_article(self, article_id: str) -> PublishedArticle | None:
        for article in self._published:
            if article.id == article_id:
                return article.model_copy(deep=True)
        return None

    def add_published(self, article: PublishedArticle) -> bool:
        """Append ``article`` unless one with the same id is already logged.

        Returns True if the article was added.
        """
        if any(a.id == article.id for a in self._published):
            logger.debug("Published article %s already present", article.id)
            return False
        self._published.append(article.model_copy(deep=True))
        self._persist()
        logger.info("Published %s (%s)", article.id, article.title)
        return True

    def delete_published(self, article_id: str) -> bool:
        before = len(self._published)
        self._published = [a for a in self._published if a.id != article_id]
        self._persist()
        return len(self._published) < before
