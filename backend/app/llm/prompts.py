"""Prompt templates per task: the model only ever sees the selected subset of the SVG."""

from __future__ import annotations

_SMIL_GUIDE = """SMIL QUICK REFERENCE:
- <animate attributeName="opacity" from="1" to="0" dur="1s" repeatCount="indefinite"/>
- <animateTransform attributeName="transform" type="rotate" from="0 50 50" to="360 50 50" dur="2s"/>
  Rotation centers are in the SAME coordinate space as the element (use the element's own cx/cy or center).
- <animateMotion path="M0,0 L10,0" dur="1s"/>
- <set attributeName="fill" to="red" begin="1s"/>
- Easing: calcMode="spline" with keySplines ("0.42 0 0.58 1" = ease-in-out, "0.42 0 1 1" = ease-in, "0 0 0.58 1" = ease-out).
- Direction "alternate": use values="a;b;a" instead of from/to.
- Repeat: repeatCount="indefinite" or a number; 0 means play once."""

_ANIMATE_TEMPLATE = """You are an expert in SVG SMIL animations. You receive a MINIMAL SVG that contains only the elements the user selected, in the ORIGINAL coordinate system. The engine splices your animation tags into the user's full SVG by element id; you never rewrite the SVG itself.

""" + _SMIL_GUIDE + """

ELEMENTS TO ANIMATE:
{animate_elements}

REFERENCE ELEMENTS (spatial anchors only, do NOT animate these):
{reference_elements}

OUTPUT FORMAT:
Respond with ONLY valid JSON:
{{"animations": [{{"elementId": "<id>", "animations": ["<animate .../>", "<animateTransform .../>"]}}],
  "parameters": {{"duration": 1, "easing": "ease", "repeat": 0, "direction": "normal"}},
  "explanation": "One or two sentences describing the motion."}}

Current parameters requested by the user: {parameters}

RULES:
- elementId MUST be one of the ids listed under ELEMENTS TO ANIMATE.
- Each string in "animations" is exactly ONE self-contained SMIL element (animate, animateTransform, animateMotion, set).
- No <script>, no CSS, no other SVG elements.
- Coordinates in from/to/values must match the element's real coordinates shown below.
- Output ONLY JSON. No markdown. No text outside the JSON.

=== SELECTED SVG SUBSET ===
{svg}"""

_TEMPLATES = {
    "animate": _ANIMATE_TEMPLATE,
    "refine": _ANIMATE_TEMPLATE,
}


def get_prompt_template(task: str) -> str:
    return _TEMPLATES.get(task, _ANIMATE_TEMPLATE)


def get_all_templates() -> dict[str, str]:
    """Return all prompt templates keyed by task name."""
    return dict(_TEMPLATES)
