"""Icon domain — the icons collection and pure SVG recoloring helpers."""

from qulome.icons.services import (
    IconService,
    clean_invalid_icons,
    default_icons,
    is_valid_icon,
)
from qulome.icons.svg import (
    COLORABLE_TAGS,
    ColorableElement,
    analyze_svg_structure,
    apply_color_to_svg,
)

__all__ = [
    "COLORABLE_TAGS",
    "ColorableElement",
    "IconService",
    "analyze_svg_structure",
    "apply_color_to_svg",
    "clean_invalid_icons",
    "default_icons",
    "is_valid_icon",
]
