"""Tests for the load-time repair passes."""

from qulome.content.models import Theme
from qulome.healer import (
    has_svg_markup,
    heal_drafts,
    heal_icons,
    heal_published,
    heal_themes,
    is_well_formed_id,
    resolve_pointer,
    validate_entries,
)


class TestHeal:
    def test_missing_collection_is_unchanged(self):
        report = heal_drafts(None)
        assert report.items == []
        assert not report.changed

    def test_non_list_is_reset(self):
        report = heal_themes({"id": "x"})
        assert report.reset
        assert report.changed
        assert report.items == []

    def test_drops_bad_entries_and_duplicates(self):
        raw = [
            {"id": "a", "content": ""},
            "garbage",
            {"id": "", "content": ""},
            {"id": "   ", "content": ""},
            {"id": 7, "content": ""},
            {"id": "a", "content": "dup"},
            {"id": "b", "content": 3},
            {"id": "c", "content": "<p>ok</p>"},
        ]
        report = heal_drafts(raw)
        assert [d["id"] for d in report.items] == ["a", "c"]
        assert report.items[0]["content"] == ""
        assert report.removed == 6

    def test_clean_collection_reports_no_change(self):
        report = heal_published([{"id": "p1"}, {"id": "p2"}])
        assert report.removed == 0
        assert not report.changed

    def test_themes_need_name_and_dict_styles(self):
        raw = [
            {"id": "t1", "name": "ok", "styles": {}},
            {"id": "t2", "name": "  "},
            {"id": "t3", "name": "x", "styles": ["bad"]},
            {"id": "t4"},
        ]
        assert [t["id"] for t in heal_themes(raw).items] == ["t1"]

    def test_icons_need_svg_markup(self):
        raw = [
            {"id": "i1", "name": "ok", "svg": "<svg></svg>"},
            {"id": "i2", "name": "half", "svg": "<svg>"},
            {"id": "i3", "name": "", "svg": "<svg></svg>"},
        ]
        assert [i["id"] for i in heal_icons(raw).items] == ["i1"]


class TestValidateEntries:
    def test_drops_entries_models_reject(self):
        report = heal_themes(
            [
                {"id": "t1", "name": "ok"},
                {"id": "t2", "name": "bad", "styles": {"--x": {"nested": 1}}},
            ]
        )
        themes = validate_entries(Theme, report, "theme")
        assert [t.id for t in themes] == ["t1"]
        assert report.removed == 1
        assert report.changed


class TestHelpers:
    def test_is_well_formed_id(self):
        assert is_well_formed_id("x")
        assert not is_well_formed_id("")
        assert not is_well_formed_id(" ")
        assert not is_well_formed_id(None)
        assert not is_well_formed_id(1)

    def test_has_svg_markup(self):
        assert has_svg_markup('<svg viewBox="0 0 1 1"></svg>')
        assert not has_svg_markup("<div></div>")
        assert not has_svg_markup(None)

    def test_resolve_pointer(self):
        assert resolve_pointer("b", ["a", "b"]) == "b"
        assert resolve_pointer("gone", ["a", "b"]) == "a"
        assert resolve_pointer(None, ["a"]) == "a"
        assert resolve_pointer("x", []) is None
