"""Content domain — the persisted record models.

Drafts, themes, icons and published articles, each stored as a JSON
list under its own key.
"""

from qulome.content.models import (
    ColorMode,
    Draft,
    Icon,
    PublishedArticle,
    Theme,
)

__all__ = [
    "ColorMode",
    "Draft",
    "Icon",
    "PublishedArticle",
    "Theme",
]
