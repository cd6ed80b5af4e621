"""Shared test fixtures."""

from __future__ import annotations

import json

import pytest

from app.models.animation import Message


# Sample SVGs

SCENARIO_SVG = (
    '<svg viewBox="0 0 100 100">'
    '<circle id="a" cx="50" cy="50" r="10"/>'
    '<rect id="b" x="0" y="0" width="10" height="10"/>'
    "</svg>"
)

SCENE_SVG = '''<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" xmlns:inkscape="http://www.inkscape.org/namespaces/inkscape" width="200px" height="120px" viewBox="0 0 200 120" inkscape:version="1.3">
  <!-- scene -->
  <defs>
    <linearGradient id="sky"><stop offset="0" stop-color="#9cf"/><stop offset="1" stop-color="#fff"/></linearGradient>
  </defs>
  <rect id="background" x="0" y="0" width="200" height="120" fill="url(#sky)"/>
  <g id="car" transform="translate(10 0)">
    <title>Car</title>
    <rect id="body" x="20" y="60" width="80" height="30" fill="#c33"/>
    <circle id="wheel-front" cx="85" cy="95" r="10" fill="#222"/>
    <circle id="wheel-back" cx="35" cy="95" r="10" fill="#222"/>
  </g>
  <path id="road" d="M0 105 L200 105" stroke="#555" stroke-width="4"/>
  <use id="sun-copy" xlink:href="#sun" x="150" y="20"/>
  <circle id="sun" cx="170" cy="25" r="12" fill="gold" inkscape:label="sun"/>
</svg>'''

HIGHLIGHTED_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 50 50">
  <circle id="dot" cx="25" cy="25" r="5" fill="blue" style="stroke: #3b82f6 !important; stroke-width: 2px" data-original-style="opacity: 0.8"/>
  <rect id="box" x="5" y="5" width="10" height="10" style="fill: red"/>
  <rect id="plain" x="30" y="30" width="10" height="10" style="outline: 2px solid" data-original-style=""/>
</svg>'''

SMILEY_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2">
  <circle id="face" cx="12" cy="12" r="10"/>
  <circle id="eye-left" cx="8" cy="9" r="1"/>
  <circle id="eye-right" cx="16" cy="9" r="1"/>
  <path id="mouth" d="M8 14s1.5 2 4 2 4-2 4-2"/>
</svg>'''

# Same shapes as SCENARIO_SVG, written with an svg: prefix and no default namespace
PREFIXED_SVG = (
    '<svg:svg xmlns:svg="http://www.w3.org/2000/svg" viewBox="0 0 100 100">'
    '<svg:circle id="a" cx="50" cy="50" r="10"/>'
    '<svg:rect id="b" x="0" y="0" width="10" height="10"/>'
    "</svg:svg>"
)

# SVG bound both as the default namespace and as svg:
DUAL_NS_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" xmlns:svg="http://www.w3.org/2000/svg" viewBox="0 0 100 100">'
    '<circle id="a" cx="50" cy="50" r="10"/>'
    '<rect id="b" x="0" y="0" width="10" height="10"/>'
    "</svg>"
)

FADE_B = "<animate attributeName='opacity' from='1' to='0' dur='1s'/>"


def payload(animations: list[dict], parameters: dict | None = None, explanation: str = "Fades out.") -> str:
    """JSON text as the model would return it."""
    return json.dumps({
        "animations": animations,
        "parameters": parameters or {},
        "explanation": explanation,
    })


class FakeLLM:
    """Stands in for AnimationLLM: returns queued responses and records every call."""

    def __init__(self, *responses: str) -> None:
        self.responses = list(responses)
        self.calls: list[dict] = []

    async def complete(
        self,
        system: str,
        question: str,
        history: list[Message] | None = None,
        task: str = "animate",
    ) -> str:
        self.calls.append({"system": system, "question": question, "history": list(history or []), "task": task})
        if not self.responses:
            raise AssertionError("FakeLLM ran out of responses")
        return self.responses.pop(0)


@pytest.fixture
def scenario_svg() -> str:
    return SCENARIO_SVG


@pytest.fixture
def scene_svg() -> str:
    return SCENE_SVG


@pytest.fixture
def highlighted_svg() -> str:
    return HIGHLIGHTED_SVG


@pytest.fixture
def smiley_svg() -> str:
    return SMILEY_SVG
