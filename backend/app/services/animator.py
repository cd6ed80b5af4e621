"""Animation generation: subset extraction, model call, splice and repair.

The model only sees the selected elements (plus reference anchors). Whatever
it answers, animations are merged back into the ORIGINAL document by element
id; its text is never used as the final document.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic import ValidationError

from app.config import Settings
from app.errors import InputTooLarge, NoElementsFound, ParseError, StructuralError, UnrepairableOutput
from app.llm.prompts import get_prompt_template
from app.models.animation import AnimationElement, AnimationParams, GenerationPayload, Message
from app.svg.extractor import ExtractOptions, dedupe_ids, describe_elements, extract_from_document
from app.svg.parser import get_element_by_id, parse_svg
from app.svg.repair import extract_svg_markup, reconcile_root_attributes, verify_complete
from app.svg.splicer import apply_animations, collect_animations

logger = logging.getLogger(__name__)

_SVG_TOKEN_RE = re.compile(r"<(?:[\w.-]+:)?svg[\s>/]", re.IGNORECASE)


class TextGenerator(Protocol):
    async def complete(
        self,
        system: str,
        question: str,
        history: list[Message] | None = None,
        task: str = "animate",
    ) -> str: ...


@dataclass
class AnimationRequest:
    svg: str
    selected_elements: list[str]
    description: str
    reference_elements: list[str] = field(default_factory=list)
    parameters: AnimationParams | None = None
    conversation: list[Message] = field(default_factory=list)


@dataclass
class GenerationResult:
    animated_svg: str
    parameters: AnimationParams
    explanation: str
    skipped: list[str] = field(default_factory=list)


def parse_generation_payload(text: str) -> tuple[GenerationPayload | None, str | None]:
    """Try to parse model output as a GenerationPayload. Returns (payload, None) or (None, error_msg)."""
    cleaned = re.sub(r"^```(?:json)?\s*\n?", "", text.strip())
    cleaned = re.sub(r"\n?```\s*$", "", cleaned)
    cleaned = cleaned.strip()

    json_match = re.search(r"\{[\s\S]*\}", cleaned)
    if json_match:
        cleaned = json_match.group(0)

    try:
        data = json.loads(cleaned)
        if not isinstance(data, dict):
            return None, "payload is not a JSON object"
        return GenerationPayload.model_validate(data), None
    except (json.JSONDecodeError, ValidationError) as e:
        return None, str(e)


def merge_parameters(requested: AnimationParams | None, suggested: dict[str, Any]) -> AnimationParams:
    """Defaults <- requested <- model-suggested; invalid suggestions are ignored."""
    base = requested or AnimationParams()
    known = {k: v for k, v in (suggested or {}).items() if k in AnimationParams.model_fields and v is not None}
    if not known:
        return base
    try:
        return AnimationParams.model_validate({**base.model_dump(), **known})
    except ValidationError as e:
        logger.warning("Ignoring invalid model parameters %s: %s", known, e.error_count())
        return base


def _animations_from_rewrite(text: str, subset_svg: str) -> list[AnimationElement]:
    """Model answered with an SVG instead of JSON: repair it, then harvest its animations."""
    candidate = extract_svg_markup(text)
    repaired = reconcile_root_attributes(candidate, subset_svg)
    if not verify_complete(repaired):
        raise UnrepairableOutput("Model returned an incomplete SVG (unbalanced tags)")
    try:
        return collect_animations(repaired)
    except (ParseError, StructuralError) as e:
        raise UnrepairableOutput(f"Model returned an unparseable SVG: {e.message}") from e


def build_animated_svg(
    original_svg: str,
    animations: list[AnimationElement],
    selected_elements: list[str],
) -> tuple[str, list[str]]:
    """Splice ``animations`` into the original and verify the result. Returns (svg, skipped ids)."""
    allowed = set(selected_elements)
    kept: list[AnimationElement] = []
    skipped: list[str] = []
    for item in animations:
        if item.element_id in allowed:
            kept.append(item)
        else:
            logger.warning("Dropping animations for #%s: not a selected element", item.element_id)
            skipped.append(item.element_id)

    if not any(item.animations for item in kept):
        raise UnrepairableOutput("Model returned no animations for the selected elements")

    result = apply_animations(original_svg, kept)
    skipped.extend(result.skipped)
    if not result.applied or not any(result.applied.values()):
        raise UnrepairableOutput("None of the animations could be applied to the original SVG")

    animated = reconcile_root_attributes(result.svg, original_svg)
    if not verify_complete(animated):
        raise UnrepairableOutput("Animated SVG failed structural verification")
    return animated, skipped


async def generate_animation(
    request: AnimationRequest,
    llm: TextGenerator,
    settings: Settings,
    task: str = "animate",
) -> GenerationResult:
    if len(request.svg) > settings.max_svg_chars:
        raise InputTooLarge(len(request.svg), settings.max_svg_chars)

    doc = parse_svg(request.svg)
    selected = dedupe_ids(request.selected_elements)
    reference = [eid for eid in dedupe_ids(request.reference_elements) if eid not in selected]

    if not any(get_element_by_id(doc, eid) is not None for eid in selected):
        raise NoElementsFound(selected)

    options = ExtractOptions(
        padding_ratio=settings.preview_padding_ratio,
        highlight_marker=settings.highlight_marker_attr,
    )
    subset_svg, debug = extract_from_document(doc, selected + reference, options)
    logger.info(
        "Generating animation: %d selected, %d reference, subset %d chars, missing %s",
        len(selected), len(reference), len(subset_svg), debug["missing"] or "none",
    )

    system = get_prompt_template(task).format(
        svg=subset_svg,
        animate_elements="\n".join(describe_elements(doc, selected)),
        reference_elements="\n".join(describe_elements(doc, reference)) or "(none)",
        parameters=(request.parameters or AnimationParams()).model_dump_json(),
    )
    text = await llm.complete(system=system, question=request.description, history=request.conversation, task=task)

    payload, parse_error = parse_generation_payload(text)
    if payload is not None:
        animations = payload.animations
        suggested = payload.parameters
        explanation = payload.explanation
    elif _SVG_TOKEN_RE.search(text):
        logger.info("Model payload not JSON (%s), harvesting animations from returned SVG", parse_error)
        animations = _animations_from_rewrite(text, subset_svg)
        suggested = {}
        explanation = ""
    else:
        raise UnrepairableOutput(f"Model output is neither a JSON payload nor an SVG: {parse_error}")

    animated_svg, skipped = build_animated_svg(request.svg, animations, selected)

    return GenerationResult(
        animated_svg=animated_svg,
        parameters=merge_parameters(request.parameters, suggested),
        explanation=explanation or "Animation applied.",
        skipped=skipped,
    )
