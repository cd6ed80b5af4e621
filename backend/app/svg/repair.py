"""Structural checks and root-tag repair for model-produced SVG text.

Models often truncate or rewrite the root ``<svg>`` tag while animating the
body correctly. The functions here work on the serialized text on purpose:
the input may be malformed in ways a real parser rejects but that are still
repairable, so only the declaration and the root start tag are patched.
"""

from __future__ import annotations

import logging
import re

from app.errors import UnrepairableOutput
from app.svg.parser import DEFAULT_XML_DECLARATION

logger = logging.getLogger(__name__)

_XML_DECL_RE = re.compile(r"^\ufeff?\s*(<\?xml\s[^>]*\?>)", re.IGNORECASE)
_SVG_OPEN_TOKEN_RE = re.compile(r"<(?:[\w.-]+:)?svg[\s>/]", re.IGNORECASE)
_SVG_OPEN_TAG_RE = re.compile(
    r"""<((?:[\w.-]+:)?svg)(?=[\s>/])((?:[^<>"']|"[^"]*"|'[^']*')*?)(/?)>""", re.IGNORECASE,
)
_SVG_CLOSE_RE = re.compile(r"</(?:[\w.-]+:)?svg\s*>", re.IGNORECASE)
_ATTR_RE = re.compile(r"""([^\s=/>"']+)\s*=\s*(?:"([^"]*)"|'([^']*)')""")

# Markup that never takes part in tag balance
_IGNORED_MARKUP_RE = re.compile(
    r"<!--[\s\S]*?-->|<!\[CDATA\[[\s\S]*?\]\]>|<\?[\s\S]*?\?>|<!DOCTYPE(?:[^<>\[]|\[[\s\S]*?\])*>",
    re.IGNORECASE,
)
_TAG_RE = re.compile(r"""<(/?)([A-Za-z_][\w:.-]*)(?:[^<>"']|"[^"]*"|'[^']*')*?(/?)>""")

_FENCE_OPEN_RE = re.compile(r"^```(?:xml|svg|html)?\s*\n?")
_FENCE_CLOSE_RE = re.compile(r"\n?```\s*$")
_DOC_START_RE = re.compile(r"<\?xml\s|<(?:[\w.-]+:)?svg[\s>/]", re.IGNORECASE)


def _declaration(text: str) -> str | None:
    m = _XML_DECL_RE.match(text)
    return m.group(1) if m else None


def _search_markup(pattern: re.Pattern[str], text: str) -> re.Match[str] | None:
    """``pattern.search`` that skips comments, CDATA, PIs and the doctype.

    Ignored spans are blanked to spaces, so match offsets stay valid for ``text``.
    """
    masked = _IGNORED_MARKUP_RE.sub(lambda m: " " * len(m.group(0)), text)
    return pattern.search(masked)


def tag_balance(text: str) -> tuple[int, int]:
    """(non-self-closing opening tags, closing tags), a cheap heuristic, not a parse."""
    body = _IGNORED_MARKUP_RE.sub("", text)
    opened = closed = 0
    for m in _TAG_RE.finditer(body):
        if m.group(1):
            closed += 1
        elif not m.group(3):
            opened += 1
    return opened, closed


def verify_complete(svg_text: str) -> bool:
    """True when the text looks like a complete SVG document.

    Requires an XML declaration, an opening <svg> tag, a closing </svg> and as
    many closing tags as non-self-closing opening tags.
    """
    if not svg_text:
        return False
    if _declaration(svg_text) is None:
        logger.debug("verify_complete: missing XML declaration")
        return False
    if not _search_markup(_SVG_OPEN_TAG_RE, svg_text):
        logger.debug("verify_complete: missing opening <svg> tag")
        return False
    if not _search_markup(_SVG_CLOSE_RE, svg_text):
        logger.debug("verify_complete: missing closing </svg> tag")
        return False
    opened, closed = tag_balance(svg_text)
    if opened != closed:
        logger.debug("verify_complete: %d opening vs %d closing tags", opened, closed)
        return False
    return True


def parse_root_attributes(tag_attrs: str) -> dict[str, str]:
    """Ordered name -> raw value map from the attribute section of a start tag."""
    attrs: dict[str, str] = {}
    for m in _ATTR_RE.finditer(tag_attrs):
        value = m.group(2) if m.group(2) is not None else m.group(3)
        attrs[m.group(1)] = value
    return attrs


def _format_attr(name: str, value: str) -> str:
    return f'{name}="{value.replace(chr(34), "&quot;")}"'


def reconcile_root_attributes(candidate: str, original: str) -> str:
    """Patch ``candidate``'s declaration and root tag from ``original``.

    Original root attributes win on shared keys; candidate-only keys survive.
    A missing close tag is appended. Raises UnrepairableOutput when the candidate
    has no usable root start tag.
    """
    if not _search_markup(_SVG_OPEN_TOKEN_RE, candidate or ""):
        raise UnrepairableOutput("Model output has no opening <svg> tag")
    cand_root = _search_markup(_SVG_OPEN_TAG_RE, candidate)
    if cand_root is None:
        raise UnrepairableOutput("Model output has a truncated <svg> start tag")
    orig_root = _search_markup(_SVG_OPEN_TAG_RE, original or "")
    if orig_root is None:
        raise UnrepairableOutput("Original SVG has no recognisable <svg> start tag")

    # The candidate keeps its own tag name so a prefixed root still matches its close tag
    tag_name, self_closing = cand_root.group(1), cand_root.group(3)
    original_attrs = parse_root_attributes(orig_root.group(2))
    candidate_attrs = parse_root_attributes(cand_root.group(2))
    merged = dict(original_attrs)
    for name, value in candidate_attrs.items():
        if name not in merged:
            merged[name] = value

    restored = [name for name in original_attrs if candidate_attrs.get(name) != original_attrs[name]]
    if restored:
        logger.info("Restored root attributes from original: %s", ", ".join(restored))

    attr_text = " ".join(_format_attr(k, v) for k, v in merged.items())
    new_tag = f"<{tag_name} {attr_text}{self_closing}>" if attr_text else f"<{tag_name}{self_closing}>"
    body = candidate[: cand_root.start()] + new_tag + candidate[cand_root.end():]

    # Declaration: the original's (or a default) replaces whatever the candidate has
    target_decl = _declaration(original) or DEFAULT_XML_DECLARATION
    m = _XML_DECL_RE.match(body)
    if m is None:
        body = f"{target_decl}\n{body.lstrip()}"
    elif m.group(1) != target_decl:
        body = f"{target_decl}{body[m.end():]}"

    if not self_closing and not _search_markup(_SVG_CLOSE_RE, body):
        logger.info("Appending missing </%s> to model output", tag_name)
        body = body.rstrip() + f"\n</{tag_name}>"

    return body


def extract_svg_markup(text: str) -> str:
    """Extract the SVG document from model output, stripping markdown fences and surrounding text."""
    stripped = _FENCE_OPEN_RE.sub("", text.strip())
    stripped = _FENCE_CLOSE_RE.sub("", stripped)
    stripped = stripped.strip()

    start = _DOC_START_RE.search(stripped)
    if start is None:
        return stripped

    closes = list(_SVG_CLOSE_RE.finditer(stripped))
    if closes and closes[-1].start() > start.start():
        return stripped[start.start(): closes[-1].end()]
    return stripped[start.start():]
