"""Tests for the content domain models."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError
from qulome.content.models import ColorMode, Draft, Icon, PublishedArticle, Theme


class TestDraft:
    def test_defaults(self):
        draft = Draft(id="draft-1")
        assert draft.title == ""
        assert draft.content == ""
        assert draft.created_at.tzinfo is not None

    def test_store_uses_camel_case(self):
        ts = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
        data = Draft(id="draft-1", content="<p>x</p>", created_at=ts, updated_at=ts).to_store()
        assert set(data) == {"id", "title", "content", "createdAt", "updatedAt"}
        assert data["createdAt"].startswith("2024-05-01T12:00:00")

    def test_reads_stored_aliases(self):
        draft = Draft.model_validate(
            {"id": "d", "content": "", "createdAt": "2024-01-01T00:00:00Z", "updatedAt": "2024-01-02T00:00:00Z"}
        )
        assert draft.updated_at.day == 2

    def test_extra_fields_survive(self):
        draft = Draft.model_validate({"id": "d", "isImported": True})
        assert draft.to_store()["isImported"] is True

    def test_id_required(self):
        with pytest.raises(ValidationError):
            Draft.model_validate({"content": "x"})


class TestTheme:
    def test_system_flag_alias(self):
        theme = Theme.model_validate({"id": "t", "name": "T", "isSystemTheme": True})
        assert theme.is_system_theme is True
        assert theme.to_store()["isSystemTheme"] is True

    def test_styles_default_empty(self):
        assert Theme(id="t", name="T").styles == {}


class TestIcon:
    def test_color_mode_from_string(self):
        icon = Icon.model_validate({"id": "i", "name": "n", "svg": "<svg></svg>", "colorMode": "fill"})
        assert icon.color_mode is ColorMode.FILL

    def test_store_shape(self):
        data = Icon(id="i", name="n", svg="<svg></svg>").to_store()
        assert data["originalSvg"] is None
        assert data["colorMode"] == "main"

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValidationError):
            Icon(id="i", name="n", svg="<svg></svg>", color_mode="outline")


class TestPublishedArticle:
    def test_aliases(self):
        article = PublishedArticle(id="pub-1", original_draft_id="draft-1", theme_id="default-1")
        data = article.to_store()
        assert data["originalDraftId"] == "draft-1"
        assert data["themeId"] == "default-1"
        assert "publishedAt" in data
