"""Tests for ThemeService — theme collection, active pointer, listeners."""

import json

import pytest
from qulome.content.models import Theme
from qulome.errors import NotFoundError, ValidationError
from qulome.storage.adapter import StorageAdapter
from qulome.storage.backends import MemoryStore
from qulome.themes.defaults import DEFAULT_STYLES, DEFAULT_THEME_ID, builtin_themes
from qulome.themes.services import RootStyleScope, ThemeService

THEMES_KEY = "qulome_themes"
POINTER_KEY = "qulome_active_theme_id"


def _make_service(items: dict[str, str] | None = None) -> tuple[ThemeService, MemoryStore]:
    store = MemoryStore(items)
    return ThemeService(StorageAdapter(store)), store


def _stored_themes(*themes: Theme) -> str:
    return json.dumps([t.to_store() for t in themes])


def _user_theme(theme_id: str, name: str) -> Theme:
    return Theme(id=theme_id, name=name, styles={"--h1-color": "#000"})


class TestInit:
    def test_seeds_default_theme(self):
        service, store = _make_service()
        themes = service.get_themes()
        assert len(themes) == 1
        assert themes[0].is_system_theme
        assert service.get_active_theme().id == themes[0].id
        assert store.get_item(POINTER_KEY) == DEFAULT_THEME_ID

    def test_default_theme_has_default_styles(self):
        service, _ = _make_service()
        assert service.get_active_theme().styles == DEFAULT_STYLES

    def test_keeps_existing_pointer(self):
        stored = _stored_themes(builtin_themes()[0], _user_theme("t2", "Mine"))
        service, _ = _make_service({THEMES_KEY: stored, POINTER_KEY: "t2"})
        assert service.get_active_theme_id() == "t2"

    def test_repairs_dangling_pointer(self):
        stored = _stored_themes(_user_theme("t1", "One"), _user_theme("t2", "Two"))
        service, store = _make_service({THEMES_KEY: stored, POINTER_KEY: "gone"})
        assert service.get_active_theme_id() == "t1"
        assert store.get_item(POINTER_KEY) == "t1"

    def test_legacy_null_pointer_repaired(self):
        stored = _stored_themes(_user_theme("t1", "One"))
        service, _ = _make_service({THEMES_KEY: stored, POINTER_KEY: "null"})
        assert service.get_active_theme_id() == "t1"

    def test_invalid_themes_dropped_on_load(self):
        raw = json.dumps(
            [
                _user_theme("t1", "One").to_store(),
                {"id": "", "name": "no id"},
                {"id": "t3", "name": ""},
                _user_theme("t1", "Duplicate").to_store(),
            ]
        )
        service, store = _make_service({THEMES_KEY: raw})
        assert [t.id for t in service.get_themes()] == ["t1"]
        assert len(json.loads(store.get_item(THEMES_KEY))) == 1

    def test_corrupt_collection_reseeds(self):
        service, _ = _make_service({THEMES_KEY: '{"not": "a list"}'})
        assert [t.id for t in service.get_themes()] == [DEFAULT_THEME_ID]

    def test_init_returns_removed_count(self):
        service, store = _make_service()
        store.set_item(THEMES_KEY, json.dumps([{"id": "x", "name": ""}, _user_theme("t", "T").to_store()]))
        assert service.init() == 1


class TestAddTheme:
    def test_adds_with_default_styles(self):
        service, _ = _make_service()
        theme = service.add_theme("  Mine  ")
        assert theme.name == "Mine"
        assert not theme.is_system_theme
        assert theme.styles == DEFAULT_STYLES
        assert theme.id.startswith("theme-")
        assert len(service.get_themes()) == 2

    @pytest.mark.parametrize("name", ["", "   "])
    def test_rejects_empty_name(self, name):
        service, _ = _make_service()
        before = service.get_themes()
        with pytest.raises(ValidationError):
            service.add_theme(name)
        assert service.get_themes() == before

    def test_rejects_duplicate_name(self):
        service, _ = _make_service()
        service.add_theme("Mine")
        before = service.get_themes()
        with pytest.raises(ValidationError):
            service.add_theme("Mine ")
        assert service.get_themes() == before

    def test_rejects_builtin_name(self):
        service, _ = _make_service()
        with pytest.raises(ValidationError):
            service.add_theme(builtin_themes()[0].name)


class TestUpdateTheme:
    def test_updates_styles_and_moves_to_end(self):
        service, _ = _make_service()
        theme = service.add_theme("Mine")
        service.add_theme("Other")
        theme.styles["--h1-color"] = "#ff0000"
        service.update_theme(theme)
        themes = service.get_themes()
        assert themes[-1].id == theme.id
        assert themes[-1].styles["--h1-color"] == "#ff0000"

    def test_rejects_blank_name(self):
        service, _ = _make_service()
        theme = service.add_theme("Mine")
        theme.name = " "
        with pytest.raises(ValidationError):
            service.update_theme(theme)

    def test_rejects_name_of_other_theme(self):
        service, _ = _make_service()
        service.add_theme("Taken")
        theme = service.add_theme("Mine")
        theme.name = "Taken"
        with pytest.raises(ValidationError):
            service.update_theme(theme)

    def test_system_flag_preserved(self):
        service, _ = _make_service()
        theme = service.get_theme(DEFAULT_THEME_ID)
        theme.is_system_theme = False
        service.update_theme(theme)
        assert service.get_theme(DEFAULT_THEME_ID).is_system_theme


class TestDeleteTheme:
    def test_system_theme_cannot_be_deleted(self):
        service, _ = _make_service()
        before = service.get_themes()
        with pytest.raises(ValidationError):
            service.delete_theme(DEFAULT_THEME_ID)
        assert service.get_themes() == before

    def test_delete_active_reassigns(self):
        service, _ = _make_service()
        theme = service.add_theme("Mine")
        service.set_active_theme(theme.id)
        assert service.delete_theme(theme.id)
        assert service.get_active_theme_id() == DEFAULT_THEME_ID

    def test_delete_last_active_clears(self):
        stored = _stored_themes(_user_theme("t1", "Only"))
        service, store = _make_service({THEMES_KEY: stored, POINTER_KEY: "t1"})
        service.delete_theme("t1")
        assert service.get_active_theme_id() is None
        assert service.get_active_theme() is None
        assert store.get_item(POINTER_KEY) is None

    def test_delete_inactive_keeps_pointer(self):
        service, _ = _make_service()
        theme = service.add_theme("Mine")
        service.delete_theme(theme.id)
        assert service.get_active_theme_id() == DEFAULT_THEME_ID

    def test_unknown_id_returns_false(self):
        service, _ = _make_service()
        assert not service.delete_theme("missing")


class TestApplyTheme:
    def test_writes_styles_to_scope(self):
        scope = RootStyleScope()
        service = ThemeService(StorageAdapter(MemoryStore()), style_scope=scope)
        theme = service.add_theme("Mine")
        service.apply_theme(theme.id)
        assert scope.get_property("--h1-color") == DEFAULT_STYLES["--h1-color"]
        assert service.get_active_theme_id() == theme.id

    def test_unknown_theme_raises(self):
        service, _ = _make_service()
        with pytest.raises(NotFoundError) as exc_info:
            service.apply_theme("missing")
        assert exc_info.value.entity_id == "missing"
        assert service.get_active_theme_id() == DEFAULT_THEME_ID

    def test_css_rendering(self):
        scope = RootStyleScope()
        scope.set_property("--h1-color", "#111")
        assert scope.to_css() == ":root {\n  --h1-color: #111;\n}\n"


class TestListeners:
    def test_notified_on_change(self):
        service, _ = _make_service()
        theme = service.add_theme("Mine")
        seen: list = []
        service.subscribe(seen.append)
        service.apply_theme(theme.id)
        assert [t.id for t in seen] == [theme.id]

    def test_not_notified_when_unchanged(self):
        service, _ = _make_service()
        seen: list = []
        service.subscribe(seen.append)
        service.apply_theme(DEFAULT_THEME_ID)
        assert seen == []

    def test_unsubscribe(self):
        service, _ = _make_service()
        theme = service.add_theme("Mine")
        seen: list = []
        unsubscribe = service.subscribe(seen.append)
        unsubscribe()
        service.set_active_theme(theme.id)
        assert seen == []

    def test_failing_listener_does_not_block_others(self):
        service, _ = _make_service()
        theme = service.add_theme("Mine")
        seen: list = []

        def broken(_theme):
            raise RuntimeError("boom")

        service.subscribe(broken)
        service.subscribe(seen.append)
        service.set_active_theme(theme.id)
        assert len(seen) == 1

    def test_notified_when_active_deleted(self):
        service, _ = _make_service()
        theme = service.add_theme("Mine")
        service.set_active_theme(theme.id)
        seen: list = []
        service.subscribe(seen.append)
        service.delete_theme(theme.id)
        assert [t.id for t in seen] == [DEFAULT_THEME_ID]


class TestBuiltins:
    def test_builtin_themes_are_system(self):
        themes = builtin_themes()
        assert [t.id for t in themes] == [DEFAULT_THEME_ID, "default-2"]
        assert all(t.is_system_theme for t in themes)
        assert set(themes[1].styles) == set(DEFAULT_STYLES)
        assert themes[1].styles != DEFAULT_STYLES

    def test_clean_invalid_themes_noop_on_clean_collection(self):
        service, _ = _make_service()
        service.add_theme("Mine")
        assert service.clean_invalid_themes() == 0
        assert len(service.get_themes()) == 2
