"""Theme collection, the active-theme pointer, and style application.

The service keeps the themes in memory, hydrated from the store when it
is constructed. Applying a theme writes its style variables onto a
``StyleScope`` (the document root in the browser app) and moves the
active pointer. Listeners registered with ``subscribe`` are told
whenever the active theme changes.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from qulome.config import QulomeConfig
from qulome.content.models import Theme, utcnow
from qulome.errors import NotFoundError, ValidationError
from qulome.healer import heal_themes, is_well_formed_id, resolve_pointer, validate_entries
from qulome.storage.adapter import SaveResult, StorageAdapter
from qulome.themes.defaults import DEFAULT_STYLES, builtin_themes

logger = logging.getLogger(__name__)

ThemeListener = Callable[[Theme | None], None]

_NULL_POINTERS = {"", "null", "undefined"}


class StyleScope(Protocol):
    """Anything that accepts CSS custom properties."""

    def set_property(self, name: str, value: str) -> None: ...


class RootStyleScope:
    """In-process stand-in for the document root's inline style."""

    def __init__(self) -> None:
        self.properties: dict[str, str] = {}

    def set_property(self, name: str, value: str) -> None:
        self.properties[name] = value

    def get_property(self, name: str) -> str | None:
        return self.properties.get(name)

    def to_css(self, selector: str = ":root") -> str:
        """Render the applied variables as a CSS rule."""
        body = "".join(f"  {name}: {value};\n" for name, value in self.properties.items())
        return f"{selector} {{\n{body}}}\n"


class ThemeService:
    """Owns the themes collection and the active-theme pointer."""

    def __init__(
        self,
        adapter: StorageAdapter,
        config: QulomeConfig | None = None,
        style_scope: StyleScope | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        config = config or QulomeConfig()
        self._adapter = adapter
        self._clock = clock
        self._themes_key = config.storage.key("themes")
        self._pointer_key = config.storage.key("active_theme")
        self.style_scope: StyleScope = style_scope if style_scope is not None else RootStyleScope()
        self._listeners: list[ThemeListener] = []
        self._themes: list[Theme] = []
        self._active_theme_id: str | None = None
        self.init()

    # ── Lifecycle ────────────────────────────────────────────────

    def init(self) -> int:
        """Load themes, seed the default theme if none exist, repair the pointer.

        Returns the number of stored themes dropped as invalid.
        """
        self._themes, removed = self._load()
        pointer = self._adapter.load_text(self._pointer_key)
        self._active_theme_id = None if pointer is None or pointer in _NULL_POINTERS else pointer

        if not self._themes:
            logger.info("No themes found, adding default theme")
            default = builtin_themes()[0]
            self._themes.append(default)
            self._persist()
            self.set_active_theme(default.id)
        elif self._find(self._active_theme_id) is None:
            repaired = resolve_pointer(self._active_theme_id, [t.id for t in self._themes])
            if self._active_theme_id is not None:
                logger.info("Active theme %r is missing, using %r", self._active_theme_id, repaired)
            self.set_active_theme(repaired)
        logger.debug("ThemeService ready with %d themes", len(self._themes))
        return removed

    def clean_invalid_themes(self) -> int:
        """Re-run the theme repair pass on the in-memory collection.

        Returns the number of themes removed.
        """
        report = heal_themes([t.to_store() for t in self._themes])
        themes = validate_entries(Theme, report, "theme")
        if report.changed:
            self._themes = themes
            self._persist()
            if self._find(self._active_theme_id) is None:
                self.set_active_theme(resolve_pointer(None, [t.id for t in self._themes]))
        return report.removed

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> tuple[list[Theme], int]:
        report = heal_themes(self._adapter.load(self._themes_key))
        themes = validate_entries(Theme, report, "theme")
        if report.changed:
            self._themes = themes
            self._persist()
        return themes, report.removed

    def _persist(self) -> SaveResult:
        result = self._adapter.save(self._themes_key, [t.to_store() for t in self._themes])
        if not result.success:
            logger.error("Themes not persisted: %s", result.error)
        return result

    def _find(self, theme_id: str | None) -> Theme | None:
        for theme in self._themes:
            if theme.id == theme_id:
                return theme
        return None

    def _new_id(self) -> str:
        while True:
            millis = int(self._clock().timestamp() * 1000)
            candidate = f"theme-{millis}-{uuid.uuid4().hex[:9]}"
            if self._find(candidate) is None:
                return candidate

    def _name_taken(self, name: str, exclude_id: str | None = None) -> bool:
        return any(t.name.strip() == name and t.id != exclude_id for t in self._themes)

    def _notify(self) -> None:
        active = self.get_active_theme()
        for listener in list(self._listeners):
            try:
                listener(active)
            except Exception:
                logger.warning("Theme listener %r failed", listener, exc_info=True)

    # ── Observers ────────────────────────────────────────────────

    def subscribe(self, listener: ThemeListener) -> Callable[[], None]:
        """Register ``listener`` for active-theme changes.

        Returns a function that removes the registration.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ── Read operations ──────────────────────────────────────────

    def get_themes(self) -> list[Theme]:
        return [t.model_copy(deep=True) for t in self._themes]

    def get_theme(self, theme_id: str | None) -> Theme | None:
        theme = self._find(theme_id)
        return theme.model_copy(deep=True) if theme else None

    def get_active_theme_id(self) -> str | None:
        return self._active_theme_id

    def get_active_theme(self) -> Theme | None:
        """Return the active theme, falling back to the first theme.

        Only returns None when there are no themes at all.
        """
        theme = self._find(self._active_theme_id)
        if theme is None and self._themes:
            theme = self._themes[0]
        return theme.model_copy(deep=True) if theme else None

    def get_default_styles(self) -> dict[str, str]:
        return dict(DEFAULT_STYLES)

    # ── Write operations ─────────────────────────────────────────

    def add_theme(self, name: str) -> Theme:
        """Create a user theme with the default styles.

        Raises ValidationError for an empty or already used name.
        """
        name = name.strip() if isinstance(name, str) else ""
        if not name:
            logger.warning("Refusing to create a theme without a name")
            raise ValidationError("Theme name cannot be empty")
        if self._name_taken(name):
            raise ValidationError(f"A theme named {name!r} already exists")

        theme = Theme(
            id=self._new_id(),
            name=name,
            is_system_theme=False,
            styles=self.get_default_styles(),
        )
        self._themes.append(theme)
        self._persist()
        logger.info("Added theme %s (%s)", theme.id, theme.name)
        return theme.model_copy(deep=True)

    def update_theme(self, theme: Theme) -> Theme:
        """Replace a theme by id, moving it to the end of the collection.

        Raises ValidationError for an empty name or id, or a name used by
        another theme.
        """
        name_ok = isinstance(theme.name, str) and bool(theme.name.strip())
        if not is_well_formed_id(theme.id) or not name_ok:
            logger.warning("Refusing to save theme with empty name or id: %r", theme.id)
            raise ValidationError("Theme name and id cannot be empty")
        if self._name_taken(theme.name.strip(), exclude_id=theme.id):
            raise ValidationError(f"A theme named {theme.name.strip()!r} already exists")

        saved = theme.model_copy(deep=True)
        existing = self._find(saved.id)
        if existing is not None and existing.is_system_theme:
            saved.is_system_theme = True
        self._themes = [t for t in self._themes if t.id != saved.id]
        self._themes.append(saved)
        self._persist()
        return saved.model_copy(deep=True)

    save_theme = update_theme

    def delete_theme(self, theme_id: str) -> bool:
        """Delete a user theme.

        If the theme was active, the first remaining theme becomes active
        (or none) and listeners are notified. An unknown id triggers a
        repair that drops themes with malformed ids.

        Raises ValidationError when asked to delete a system theme.
        Returns True if a theme with ``theme_id`` was removed.
        """
        theme = self._find(theme_id)
        if theme is None:
            before = len(self._themes)
            self._themes = [t for t in self._themes if t.is_system_theme or is_well_formed_id(t.id)]
            if len(self._themes) < before:
                self._persist()
            logger.warning(
                "Theme %r not found, cleaned %d malformed themes",
                theme_id,
                before - len(self._themes),
            )
            return False
        if theme.is_system_theme:
            raise ValidationError("System themes cannot be deleted")

        active = self.get_active_theme()
        was_active = active is not None and active.id == theme.id
        self._themes.remove(theme)
        self._persist()
        logger.info("Deleted theme %s", theme_id)

        if was_active:
            self.set_active_theme(self._themes[0].id if self._themes else None)
        return True

    def set_active_theme(self, theme_id: str | None) -> None:
        """Persist the active pointer and notify listeners if it moved."""
        previous = self._active_theme_id
        self._active_theme_id = theme_id
        self._adapter.save_text(self._pointer_key, theme_id)
        logger.debug("Active theme set to %r", theme_id)
        if previous != theme_id:
            self._notify()

    def apply_theme(self, theme_id: str) -> Theme:
        """Write the theme's style variables onto the scope and activate it.

        Raises NotFoundError if no theme has ``theme_id``.
        """
        theme = self._find(theme_id)
        if theme is None:
            logger.error("Theme not found: %r", theme_id)
            raise NotFoundError("Theme", theme_id)
        for name, value in theme.styles.items():
            self.style_scope.set_property(name, value)
        self.set_active_theme(theme.id)
        logger.debug("Applied theme %s", theme.name)
        return theme.model_copy(deep=True)
