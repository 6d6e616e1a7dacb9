"""Icon collection with SVG recoloring.

Every icon keeps the SVG it was added with in ``original_svg``. Colors
are always applied to that pristine copy, so changing an icon's color
repeatedly never compounds earlier edits.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from qulome.config import QulomeConfig
from qulome.content.models import ColorMode, Icon, utcnow
from qulome.errors import ValidationError
from qulome.healer import has_svg_markup, heal_icons, is_well_formed_id, validate_entries
from qulome.icons.svg import apply_color_to_svg
from qulome.storage.adapter import SaveResult, StorageAdapter

logger = logging.getLogger(__name__)

_RIGHT_ARROW_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24" width="24" height="24"'
    ' fill="currentColor"><path d="M16.172 11l-5.364-5.364 1.414-1.414L20 12l-7.778'
    ' 7.778-1.414-1.414L16.172 13H4v-2h12.172z"/></svg>'
)
_CHECK_MARK_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24" width="24" height="24"'
    ' fill="currentColor"><path d="M10 15.172l9.192-9.193 1.415 1.414L10 18l-6.364-6.364'
    ' 1.414-1.414z"/></svg>'
)

_ALIASES = {f.alias: name for name, f in Icon.model_fields.items() if f.alias}


def default_icons() -> list[Icon]:
    return [
        Icon(
            id="icon-default-1",
            name="Right Arrow",
            svg=_RIGHT_ARROW_SVG,
            original_svg=_RIGHT_ARROW_SVG,
            color=None,
            color_mode=ColorMode.MAIN,
        ),
        Icon(
            id="icon-default-2",
            name="Check Mark",
            svg=_CHECK_MARK_SVG,
            original_svg=_CHECK_MARK_SVG,
            color="#22c55e",
            color_mode=ColorMode.MAIN,
        ),
    ]


def is_valid_icon(icon: Icon | Mapping[str, Any] | None) -> bool:
    """True when the icon has an id, a name and well-formed SVG markup."""
    if icon is None:
        return False
    data = icon.to_store() if isinstance(icon, Icon) else icon
    if not isinstance(data, Mapping):
        return False
    if not is_well_formed_id(data.get("id")) or not is_well_formed_id(data.get("name")):
        return False
    if not data.get("svg"):
        return False
    return has_svg_markup(data.get("svg"))


def clean_invalid_icons(icons: object) -> list[Any]:
    """Filter a list down to valid icons; anything but a list yields []."""
    if not isinstance(icons, list):
        return []
    return [icon for icon in icons if is_valid_icon(icon)]


class IconService:
    """Owns the icons collection."""

    def __init__(
        self,
        adapter: StorageAdapter,
        config: QulomeConfig | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        config = config or QulomeConfig()
        self._adapter = adapter
        self._clock = clock
        self._icons_key = config.storage.key("icons")
        self._icons: list[Icon] = []
        self._icons, _ = self._load()

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> tuple[list[Icon], int]:
        raw = self._adapter.load(self._icons_key)
        if not isinstance(raw, list):
            if raw is not None:
                logger.warning("Icons collection is corrupt, restoring defaults")
            self._icons = default_icons()
            self._persist()
            return self._icons, 0
        report = heal_icons(raw)
        icons = validate_entries(Icon, report, "icon")
        if report.changed:
            self._icons = icons
            self._persist()
        return icons, report.removed

    def _persist(self) -> SaveResult:
        result = self._adapter.save(self._icons_key, [i.to_store() for i in self._icons])
        if not result.success:
            logger.error("Icons not persisted: %s", result.error)
        return result

    def _index(self, icon_id: str) -> int | None:
        for index, icon in enumerate(self._icons):
            if icon.id == icon_id:
                return index
        return None

    def _name_taken(self, name: str, exclude_id: str | None = None) -> bool:
        return any(i.name.strip() == name.strip() and i.id != exclude_id for i in self._icons)

    def _new_id(self) -> str:
        while True:
            millis = int(self._clock().timestamp() * 1000)
            candidate = f"icon-{millis}-{uuid.uuid4().hex[:9]}"
            if self._index(candidate) is None:
                return candidate

    def reload(self) -> int:
        """Re-read icons from the store, repairing them.

        Returns the number of stored entries dropped as invalid.
        """
        self._icons, removed = self._load()
        return removed

    # ── Read operations ──────────────────────────────────────────

    def get_icons(self) -> list[Icon]:
        return [i.model_copy(deep=True) for i in self._icons]

    def get_icon(self, icon_id: str) -> Icon | None:
        index = self._index(icon_id)
        return self._icons[index].model_copy(deep=True) if index is not None else None

    # ── Write operations ─────────────────────────────────────────

    def add_icon(self, name: str, svg: str) -> Icon:
        """Add an icon.

        Raises ValidationError for an empty name or SVG, markup without
        opening and closing svg tags, or a name that is already used.
        """
        name = name.strip() if isinstance(name, str) else ""
        if not name or not svg:
            raise ValidationError("Icon name and SVG content are required")
        if not has_svg_markup(svg):
            raise ValidationError("Invalid SVG format")
        if self._name_taken(name):
            raise ValidationError(f"Icon name {name!r} already exists")

        icon = Icon(
            id=self._new_id(),
            name=name,
            svg=svg,
            original_svg=svg,
            color=None,
            color_mode=ColorMode.MAIN,
        )
        self._icons.append(icon)
        self._persist()
        logger.info("Added icon %s (%s)", icon.id, icon.name)
        return icon.model_copy(deep=True)

    def save_icon(self, icon: Icon) -> Icon:
        """Insert or replace an icon by id, as a backup restore does.

        Raises ValidationError for an invalid icon or a name used by a
        different icon.
        """
        if not is_valid_icon(icon) or not is_well_formed_id(icon.id):
            raise ValidationError(f"Invalid icon {icon.id!r}")
        if self._name_taken(icon.name, exclude_id=icon.id):
            raise ValidationError(f"Icon name {icon.name!r} already exists")
        saved = icon.model_copy(deep=True)
        if saved.original_svg is None:
            saved.original_svg = saved.svg
        index = self._index(saved.id)
        if index is None:
            self._icons.append(saved)
        else:
            self._icons[index] = saved
        self._persist()
        return saved.model_copy(deep=True)

    def delete_icon(self, icon_id: str) -> bool:
        before = len(self._icons)
        self._icons = [i for i in self._icons if i.id != icon_id]
        self._persist()
        return len(self._icons) < before

    def update_icon(self, icon_id: str, updates: Mapping[str, Any]) -> Icon | None:
        """Patch fields of an icon.

        ``svg`` and ``id`` are never patched directly. When ``color`` is
        given the SVG is re-derived from the original markup, using
        ``color_mode`` from the update or the icon's current mode; a color
        of None restores the original markup.

        Returns the updated icon, or None if the id is unknown.
        """
        index = self._index(icon_id)
        if index is None:
            return None

        fields = {_ALIASES.get(key, key): value for key, value in updates.items()}
        fields.pop("id", None)
        fields.pop("svg", None)
        icon = self._icons[index].model_copy(deep=True)
        source = icon.original_svg or icon.svg

        if "color" in fields:
            color = fields.pop("color")
            mode = ColorMode(fields.pop("color_mode", None) or icon.color_mode)
            icon.svg = apply_color_to_svg(source, color, mode) if color else source
            icon.color = color
            icon.color_mode = mode

        if "name" in fields:
            name = fields["name"].strip() if isinstance(fields["name"], str) else ""
            fields["name"] = name
            if not name:
                raise ValidationError("Icon name cannot be empty")
            if self._name_taken(name, exclude_id=icon.id):
                raise ValidationError(f"Icon name {name!r} already exists")

        patched = Icon.model_validate({**icon.model_dump(), **fields})
        self._icons[index] = patched
        self._persist()
        return patched.model_copy(deep=True)

    def update_icon_color(
        self,
        icon_id: str,
        color: str,
        mode: ColorMode | str = ColorMode.MAIN,
    ) -> Icon | None:
        """Recolor an icon from its original SVG.

        Records written before ``original_svg`` existed get it backfilled
        from ``svg`` first. Returns None if the id is unknown.
        """
        index = self._index(icon_id)
        if index is None:
            return None
        icon = self._icons[index]
        if not icon.original_svg:
            icon.original_svg = icon.svg
        mode = ColorMode(mode)
        icon.svg = apply_color_to_svg(icon.original_svg, color, mode)
        icon.color = color
        icon.color_mode = mode
        self._persist()
        return icon.model_copy(deep=True)
