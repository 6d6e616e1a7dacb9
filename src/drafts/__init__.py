"""Draft domain — the drafts collection, current pointer and title rules."""

from qulome.drafts.services import (
    EMPTY_PARAGRAPH,
    UNTITLED_PLACEHOLDER,
    DraftService,
    extract_title,
    is_orphan,
)

__all__ = [
    "EMPTY_PARAGRAPH",
    "UNTITLED_PLACEHOLDER",
    "DraftService",
    "extract_title",
    "is_orphan",
]
