"""Subset extraction: a standalone preview SVG holding only the selected elements.

The preview keeps the original coordinate system: the selection is framed by
a viewBox computed from its approximate bounds plus padding, so clones are
appended unchanged (or, optionally, inside one translated group).
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any

from lxml import etree

from app.errors import NoElementsFound
from app.svg.bounds import BoundingBox, element_bounds, group_bounds
from app.svg.parser import (
    SVG_NS,
    SvgDocument,
    find_svg_root,
    get_element_by_id,
    iter_elements,
    local_name,
    namespace_of,
    parse_svg,
    serialize_element,
)

logger = logging.getLogger(__name__)

_METADATA_TAGS = {"title", "desc", "metadata"}

# Used when the selection has no extent at all (a single point)
_ZERO_SPAN_PADDING = 1.0


@dataclass
class ExtractOptions:
    padding_ratio: float = 0.1
    translate_to_origin: bool = False
    highlight_marker: str = "data-original-style"
    strip_metadata: bool = True


def _fmt(value: float) -> str:
    """Compact number formatting for attribute values (no trailing .0)."""
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def dedupe_ids(element_ids: list[str]) -> list[str]:
    """Keep the first occurrence of each id, preserving order."""
    seen: set[str] = set()
    result: list[str] = []
    for eid in element_ids:
        if eid in seen:
            continue
        seen.add(eid)
        result.append(eid)
    return result


def _restore_style(element: etree._Element, marker: str) -> None:
    """Undo selection highlighting injected upstream.

    The marker attribute holds the pre-highlight ``style``; without a marker
    the current style is taken as clean.
    """
    original = element.get(marker)
    if original is None:
        return
    if original.strip():
        element.set("style", original)
    elif "style" in element.attrib:
        del element.attrib["style"]
    del element.attrib[marker]


def _strip_metadata(element: etree._Element) -> None:
    for child in list(element.iter()):
        if child is element:
            continue
        if not isinstance(child.tag, str) or local_name(child) in _METADATA_TAGS:
            parent = child.getparent()
            if parent is None:
                continue
            # Keep surrounding text intact when dropping the node
            if child.tail:
                prev = child.getprevious()
                if prev is not None:
                    prev.tail = (prev.tail or "") + child.tail
                else:
                    parent.text = (parent.text or "") + child.tail
            parent.remove(child)


def _to_svg_namespace(element: etree._Element) -> None:
    for el in iter_elements(element):
        if namespace_of(el) is None:
            el.tag = f"{{{SVG_NS}}}{el.tag}"


def clean_clone(element: etree._Element, options: ExtractOptions) -> etree._Element:
    """Deep copy of ``element`` with highlight styling removed, ready for a new document."""
    clone = copy.deepcopy(element)
    clone.tail = None
    for el in iter_elements(clone):
        _restore_style(el, options.highlight_marker)
    if options.strip_metadata:
        _strip_metadata(clone)
    _to_svg_namespace(clone)
    return clone


def _element_debug(element_id: str, element: etree._Element | None, box: BoundingBox | None) -> dict[str, Any]:
    if element is None:
        return {"id": element_id, "found": False}
    return {
        "id": element_id,
        "found": True,
        "tag": local_name(element),
        "x": element.get("x") or element.get("cx"),
        "y": element.get("y") or element.get("cy"),
        "transform": element.get("transform"),
        "bounds": box.as_dict() if box else None,
    }


def preview_window(box: BoundingBox, padding_ratio: float) -> tuple[float, float, float, float, float]:
    """(min_x, min_y, width, height, padding) of the padded view window around ``box``."""
    span = max(box.width, box.height)
    padding = span * padding_ratio if span > 0 else _ZERO_SPAN_PADDING
    return (
        box.min_x - padding,
        box.min_y - padding,
        box.width + 2 * padding,
        box.height + 2 * padding,
        padding,
    )


def extract_subset(
    svg_text: str,
    element_ids: list[str],
    options: ExtractOptions | None = None,
) -> tuple[str, dict[str, Any]]:
    """Build a minimal standalone SVG containing only ``element_ids``.

    Returns (preview_svg_text, debug). Ids that do not resolve are skipped and
    listed under ``debug["missing"]``; if none resolve, NoElementsFound.
    """
    options = options or ExtractOptions()
    doc = parse_svg(svg_text)
    return extract_from_document(doc, element_ids, options)


def extract_from_document(
    doc: SvgDocument,
    element_ids: list[str],
    options: ExtractOptions,
) -> tuple[str, dict[str, Any]]:
    original_svg = find_svg_root(doc)
    requested = dedupe_ids(element_ids)

    resolved: list[tuple[str, etree._Element]] = []
    missing: list[str] = []
    for eid in requested:
        element = get_element_by_id(doc, eid)
        if element is None:
            logger.warning("Element #%s not found, skipping", eid)
            missing.append(eid)
        else:
            resolved.append((eid, element))

    if not resolved:
        raise NoElementsFound(requested)

    box = group_bounds(el for _, el in resolved)
    min_x, min_y, width, height, padding = preview_window(box, options.padding_ratio)

    # SVG stays the default namespace (inline HTML ignores prefixed SVG tags); other
    # prefixed declarations are carried so cloned xlink:href etc. stay bound
    nsmap = {
        None: SVG_NS,
        **{prefix: uri for prefix, uri in original_svg.nsmap.items() if prefix is not None and uri != SVG_NS},
    }
    preview = etree.Element(f"{{{SVG_NS}}}svg", nsmap=nsmap)

    if options.translate_to_origin:
        preview.set("viewBox", f"0 0 {_fmt(width)} {_fmt(height)}")
    else:
        preview.set("viewBox", f"{_fmt(min_x)} {_fmt(min_y)} {_fmt(width)} {_fmt(height)}")
    preview.set("preserveAspectRatio", "xMidYMid meet")

    container = preview
    if options.translate_to_origin:
        container = etree.SubElement(preview, f"{{{SVG_NS}}}g")
        container.set("transform", f"translate({_fmt(-box.min_x + padding)} {_fmt(-box.min_y + padding)})")

    elements_debug: list[dict[str, Any]] = []
    for eid, element in resolved:
        container.append(clean_clone(element, options))
        elements_debug.append(_element_debug(eid, element, element_bounds(element)))

    debug: dict[str, Any] = {
        "original_view_box": original_svg.get("viewBox"),
        "original_width": original_svg.get("width"),
        "original_height": original_svg.get("height"),
        "requested": requested,
        "missing": missing,
        "elements": elements_debug,
        "bounds": box.as_dict(),
        "view_box": preview.get("viewBox"),
        "source_length": doc.source_length,
    }

    logger.info(
        "Extracted %d/%d elements, viewBox %s",
        len(resolved), len(requested), debug["view_box"],
    )
    return serialize_element(preview), debug


def describe_elements(doc: SvgDocument, element_ids: list[str]) -> list[str]:
    """One-line description per id for model prompts, e.g. '#a (circle at x=50, y=50)'."""
    lines: list[str] = []
    for eid in dedupe_ids(element_ids):
        element = get_element_by_id(doc, eid)
        if element is None:
            lines.append(f"#{eid}")
            continue
        x = element.get("x") or element.get("cx") or "0"
        y = element.get("y") or element.get("cy") or "0"
        transform = element.get("transform")
        desc = f"#{eid} ({local_name(element)} at x={x}, y={y}"
        if transform:
            desc += f", transform={transform}"
        lines.append(desc + ")")
    return lines
