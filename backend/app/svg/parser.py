"""SVG parser: facade over lxml.

Turns raw SVG text into a mutable element tree and back. The rest of the
pipeline only uses the element API exposed here (lookup by id, local names,
clone, append, serialize), never the source text offsets.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from lxml import etree

from app.errors import ParseError, StructuralError

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

DEFAULT_XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

_XML_DECL_RE = re.compile(r"^\ufeff?\s*(<\?xml\s[^>]*\?>)", re.IGNORECASE)
_SVG_TOKEN_RE = re.compile(r"<(?:[\w.-]+:)?svg[\s>/]", re.IGNORECASE)


@dataclass
class SvgDocument:
    """A parsed SVG document.

    ``root`` is the document element (normally the ``<svg>`` itself).
    ``declaration`` is the XML declaration captured from the source, kept
    out of the tree so encoding declarations never clash with str input.
    """

    root: etree._Element
    declaration: str | None = None
    source_length: int = 0

    @property
    def tree(self) -> etree._ElementTree:
        return self.root.getroottree()


def _make_parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        load_dtd=False,
        huge_tree=False,
        remove_blank_text=False,
    )


def parse_svg(svg_text: str) -> SvgDocument:
    """Parse raw SVG text into an SvgDocument."""
    if not svg_text or not _SVG_TOKEN_RE.search(svg_text):
        raise ParseError("Input does not contain an <svg> element")

    declaration = None
    body = svg_text
    m = _XML_DECL_RE.match(svg_text)
    if m:
        declaration = m.group(1)
        body = svg_text[m.end():]

    try:
        root = etree.fromstring(body.lstrip("\ufeff").strip(), parser=_make_parser())
    except (etree.XMLSyntaxError, ValueError) as e:
        raise ParseError(f"SVG is not well-formed: {e}") from e

    logger.debug("Parsed SVG: %d chars, root <%s>", len(svg_text), local_name(root))
    return SvgDocument(root=root, declaration=declaration, source_length=len(svg_text))


def serialize_svg(doc: SvgDocument, xml_declaration: bool | None = None) -> str:
    """Serialize the whole document.

    ``xml_declaration``: None keeps whatever the source had, True forces one
    (the captured declaration, else a UTF-8 default), False drops it.
    """
    body = etree.tostring(doc.tree, encoding="unicode")

    if xml_declaration is None:
        declaration = doc.declaration
    elif xml_declaration:
        declaration = doc.declaration or DEFAULT_XML_DECLARATION
    else:
        declaration = None

    if declaration:
        return f"{declaration}\n{body}"
    return body


def serialize_element(element: etree._Element) -> str:
    return etree.tostring(element, encoding="unicode", with_tail=False)


def parse_fragment(fragment: str, context: etree._Element | None = None) -> list[etree._Element]:
    """Parse a markup fragment in the namespace context of ``context``.

    An un-prefixed ``<animate>`` therefore lands in the same namespace as the
    element it will be appended to, and ``xlink:`` prefixes always resolve.
    Returns the fragment's top-level elements, detached-ready (tails cleared).
    Raises ParseError on malformed markup or stray text between elements.
    """
    nsmap = dict(context.nsmap) if context is not None else {None: SVG_NS}
    # A prefixed context (<svg:rect>) has no default namespace to inherit
    if None not in nsmap and namespace_of(context) is not None:
        nsmap[None] = namespace_of(context)
    nsmap.setdefault("xlink", XLINK_NS)
    decls = " ".join(
        f'xmlns="{uri}"' if prefix is None else f'xmlns:{prefix}="{uri}"'
        for prefix, uri in nsmap.items()
    )

    try:
        wrapper = etree.fromstring(f"<fragment {decls}>{fragment.strip()}</fragment>", parser=_make_parser())
    except (etree.XMLSyntaxError, ValueError) as e:
        raise ParseError(str(e)) from e

    if wrapper.text and wrapper.text.strip():
        raise ParseError(f"unexpected text {wrapper.text.strip()[:40]!r}")

    elements: list[etree._Element] = []
    for child in wrapper:
        if child.tail and child.tail.strip():
            raise ParseError(f"unexpected text {child.tail.strip()[:40]!r}")
        child.tail = None
        if isinstance(child.tag, str):
            elements.append(child)
    return elements


def local_name(element: etree._Element) -> str:
    """Tag name without namespace; empty for comments and processing instructions."""
    if not isinstance(element.tag, str):
        return ""
    return etree.QName(element).localname


def namespace_of(element: etree._Element) -> str | None:
    if not isinstance(element.tag, str):
        return None
    return etree.QName(element).namespace


def find_svg_root(doc: SvgDocument) -> etree._Element:
    """Return the root <svg> element, raising StructuralError when absent."""
    if local_name(doc.root) == "svg":
        return doc.root
    for el in doc.root.iter(etree.Element):
        if local_name(el) == "svg":
            return el
    raise StructuralError("Invalid SVG: no svg element found")


def get_element_by_id(doc: SvgDocument, element_id: str) -> etree._Element | None:
    """Look up an element by id. Ids are not required to be unique; the last one wins."""
    matches = doc.root.xpath("//*[@id=$eid]", eid=element_id)
    return matches[-1] if matches else None


def iter_elements(element: etree._Element):
    """Yield ``element`` and all descendant elements in document order, skipping comments/PIs."""
    return element.iter(etree.Element)


def count_elements(element: etree._Element) -> int:
    return sum(1 for _ in iter_elements(element))
