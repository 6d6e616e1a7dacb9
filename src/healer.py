"""Repair passes for stored collections.

Each service runs the matching ``heal_*`` function once when it loads
its collection from the store. The functions take whatever JSON came
back (possibly not even a list) and return the entries that are safe to
validate, dropping non-objects, blank or non-string ids, duplicate ids
(first occurrence wins) and entries missing the fields their service
relies on. Nothing here raises: corruption is repaired, not reported to
the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

Entry = dict[str, Any]
M = TypeVar("M", bound=BaseModel)


@dataclass
class RepairReport:
    """Result of one repair pass."""

    items: list[Entry] = field(default_factory=list)
    removed: int = 0
    reset: bool = False  # the stored value was not a list at all

    @property
    def changed(self) -> bool:
        return self.reset or self.removed > 0


def is_well_formed_id(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _non_blank(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _heal(raw: object, label: str, keep: Callable[[Entry], bool]) -> RepairReport:
    if raw is None:
        return RepairReport()
    if not isinstance(raw, list):
        logger.warning("%s collection is not a list, resetting", label)
        return RepairReport(reset=True)

    seen: set[str] = set()
    items: list[Entry] = []
    for entry in raw:
        if not isinstance(entry, dict) or not is_well_formed_id(entry.get("id")):
            continue
        if entry["id"] in seen or not keep(entry):
            continue
        seen.add(entry["id"])
        items.append(entry)

    report = RepairReport(items=items, removed=len(raw) - len(items))
    if report.removed:
        logger.info("Removed %d invalid %s entries", report.removed, label)
    return report


def heal_drafts(raw: object) -> RepairReport:
    """Drop drafts without an id or with non-string content."""
    return _heal(raw, "draft", lambda d: isinstance(d.get("content", ""), str))


def heal_themes(raw: object) -> RepairReport:
    """Drop themes with a blank id or name, or a repeated id."""

    def keep(theme: Entry) -> bool:
        styles = theme.get("styles", {})
        return _non_blank(theme.get("name")) and isinstance(styles, dict)

    return _heal(raw, "theme", keep)


def has_svg_markup(svg: object) -> bool:
    """True when ``svg`` is a string with both an opening and closing svg tag."""
    return isinstance(svg, str) and "<svg" in svg and "</svg>" in svg


def heal_icons(raw: object) -> RepairReport:
    """Drop icons without a name or without usable SVG markup."""
    return _heal(
        raw,
        "icon",
        lambda icon: _non_blank(icon.get("name")) and has_svg_markup(icon.get("svg")),
    )


def heal_published(raw: object) -> RepairReport:
    """Drop published articles without an id; de-duplicate by id."""
    return _heal(raw, "published", lambda article: True)


def validate_entries(model: type[M], report: RepairReport, label: str) -> list[M]:
    """Build models from healed entries, dropping the ones that still fail.

    Entries rejected here are counted on ``report`` so the caller persists
    the cleaned collection.
    """
    models: list[M] = []
    for entry in report.items:
        try:
            models.append(model.model_validate(entry))
        except PydanticValidationError:
            logger.warning("Dropping unreadable %s %r", label, entry.get("id"))
            report.removed += 1
    return models


def resolve_pointer(pointer: str | None, ids: Iterable[str]) -> str | None:
    """Return ``pointer`` if it names one of ``ids``, else the first id, else None."""
    ids = list(ids)
    if pointer and pointer in ids:
        return pointer
    return ids[0] if ids else None
