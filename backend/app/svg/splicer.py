"""Surgical animation splicer: appends SMIL fragments to elements of the original SVG.

Operations reference elements by their ``id`` attribute. Only the targeted
elements gain children; every other node is left as parsed, so the output
differs from the input only by the new animation nodes, an optional root
``<defs>`` and serializer whitespace normalisation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from lxml import etree

from app.errors import FragmentParseError, ParseError
from app.models.animation import AnimationElement
from app.svg.parser import (
    SVG_NS,
    find_svg_root,
    get_element_by_id,
    local_name,
    namespace_of,
    parse_fragment,
    parse_svg,
    serialize_element,
    serialize_svg,
)

logger = logging.getLogger(__name__)

SMIL_TAGS = frozenset({"animate", "animateTransform", "animateMotion", "animateColor", "set"})


@dataclass
class SpliceResult:
    svg: str
    applied: dict[str, int] = field(default_factory=dict)  # element id -> fragments appended
    skipped: list[str] = field(default_factory=list)  # ids that did not resolve


def _ensure_defs(svg_root: etree._Element) -> None:
    """Make sure the root has a <defs> child; create it as first child if none."""
    for child in svg_root:
        if local_name(child) == "defs":
            return
    ns = namespace_of(svg_root)
    defs = etree.Element(f"{{{ns}}}defs" if ns else "defs")
    # Keep the root's leading indentation in front of the old first child
    if svg_root.text and not svg_root.text.strip():
        defs.tail = svg_root.text
    svg_root.insert(0, defs)
    logger.debug("Created <defs> as first root child")


def _parse_animation(element_id: str, fragment: str, target: etree._Element) -> etree._Element:
    if not fragment or not fragment.strip():
        raise FragmentParseError(element_id, fragment, "empty fragment")
    try:
        nodes = parse_fragment(fragment, context=target)
    except ParseError as e:
        raise FragmentParseError(element_id, fragment, e.message) from e

    if len(nodes) != 1:
        raise FragmentParseError(element_id, fragment, f"expected one element, got {len(nodes)}")
    node = nodes[0]
    if local_name(node) not in SMIL_TAGS:
        raise FragmentParseError(element_id, fragment, f"<{local_name(node)}> is not a SMIL animation element")
    if namespace_of(node) not in (namespace_of(target), SVG_NS):
        raise FragmentParseError(element_id, fragment, f"unexpected namespace {namespace_of(node)!r}")
    return node


def apply_animations(original_svg: str, animation_elements: Iterable[AnimationElement]) -> SpliceResult:
    """Splice every fragment into its target element of ``original_svg``.

    All fragments are parsed before the document is touched; one bad fragment
    fails the whole batch with FragmentParseError. Unknown ids are skipped.
    """
    doc = parse_svg(original_svg)
    svg_root = find_svg_root(doc)

    planned: list[tuple[str, etree._Element, list[etree._Element]]] = []
    skipped: list[str] = []
    for item in animation_elements:
        target = get_element_by_id(doc, item.element_id)
        if target is None:
            logger.warning("Animation target #%s not found, skipping", item.element_id)
            skipped.append(item.element_id)
            continue
        nodes = [_parse_animation(item.element_id, fragment, target) for fragment in item.animations]
        planned.append((item.element_id, target, nodes))

    _ensure_defs(svg_root)

    applied: dict[str, int] = {}
    for element_id, target, nodes in planned:
        for node in nodes:
            target.append(node)
        applied[element_id] = applied.get(element_id, 0) + len(nodes)

    logger.info(
        "Spliced %d animations into %d elements (%d skipped)",
        sum(applied.values()), len(applied), len(skipped),
    )
    return SpliceResult(svg=serialize_svg(doc), applied=applied, skipped=skipped)


def splice_animations(original_svg: str, animation_elements: Iterable[AnimationElement]) -> str:
    """Return the whole original document with the animation fragments appended."""
    return apply_animations(original_svg, animation_elements).svg


def collect_animations(svg_text: str) -> list[AnimationElement]:
    """Harvest SMIL children of id-carrying elements from a model-rewritten SVG.

    Used when the model answers with an animated SVG instead of the JSON
    payload: the animations are re-merged into the original by id, the rest
    of the model's document is ignored.
    """
    doc = parse_svg(svg_text)
    found: dict[str, list[str]] = {}
    for el in find_svg_root(doc).iter(etree.Element):
        element_id = el.get("id")
        if not element_id:
            continue
        for child in el:
            if local_name(child) in SMIL_TAGS:
                found.setdefault(element_id, []).append(serialize_element(child))
    return [AnimationElement(element_id=eid, animations=frags) for eid, frags in found.items()]
