"""Pure SVG helpers: recoloring, validation and structure inspection.

Everything here is string in, string out. Documents are parsed with
ElementTree, walked, and serialized again; no state is kept between
calls, which keeps recoloring idempotent.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Any

from pydantic import BaseModel

from qulome.content.models import ColorMode

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

# Serialize with a default namespace instead of ns0: prefixes
ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)

COLORABLE_TAGS = frozenset({"path", "circle", "polygon", "ellipse", "line", "polyline"})
ANALYZED_TAGS = frozenset({"path", "rect", "circle", "polygon", "line", "polyline"})
INHERIT_FILL = "currentColor"


class ColorableElement(BaseModel):
    """One shape found by ``analyze_svg_structure``."""

    tag_name: str
    has_fill: bool
    has_stroke: bool


def _local_name(tag: Any) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _style_declares(element: ET.Element, prop: str) -> bool:
    style = element.get("style", "")
    for declaration in style.split(";"):
        name, _, value = declaration.partition(":")
        if name.strip() == prop and value.strip():
            return True
    return False


def _find_svg_root(svg_string: str) -> ET.Element | None:
    try:
        root = ET.fromstring(svg_string)
    except ET.ParseError as exc:
        logger.warning("Could not parse SVG: %s", exc)
        return None
    if _local_name(root.tag) != "svg":
        logger.warning("Markup root is <%s>, not <svg>", _local_name(root.tag))
        return None
    return root


def apply_color_to_svg(svg_string: str, color: str, mode: ColorMode | str = ColorMode.MAIN) -> str:
    """Return ``svg_string`` recolored with ``color``.

    In fill mode every colorable shape gets ``fill``. In main mode a shape
    with a visible stroke gets ``stroke``, anything else gets ``fill``.
    A ``fill="currentColor"`` on the root is removed afterwards. Input
    that does not parse, or whose root element is not svg, is returned
    unchanged.
    """
    mode = ColorMode(mode)
    svg = _find_svg_root(svg_string)
    if svg is None:
        return svg_string

    def visit(element: ET.Element) -> None:
        if _local_name(element.tag) in COLORABLE_TAGS:
            if mode is ColorMode.FILL:
                element.set("fill", color)
            elif element.get("stroke") not in (None, "none"):
                element.set("stroke", color)
            else:
                element.set("fill", color)
        for child in element:
            visit(child)

    visit(svg)
    if svg.get("fill") == INHERIT_FILL:
        del svg.attrib["fill"]
    return ET.tostring(svg, encoding="unicode")


def analyze_svg_structure(svg_string: str) -> list[ColorableElement]:
    """List the shapes in an SVG and whether each already sets fill/stroke."""
    svg = _find_svg_root(svg_string)
    if svg is None:
        return []
    return [
        ColorableElement(
            tag_name=_local_name(element.tag),
            has_fill="fill" in element.attrib or _style_declares(element, "fill"),
            has_stroke="stroke" in element.attrib or _style_declares(element, "stroke"),
        )
        for element in svg.iter()
        if _local_name(element.tag) in ANALYZED_TAGS
    ]
