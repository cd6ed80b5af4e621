"""Approximate bounding boxes from SVG shape attributes.

These are heuristics, not exact geometry: path data is read as a flat list of
numbers alternating X/Y, transforms are ignored. Good enough to frame a
preview window around a selection.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import asdict, dataclass

import numpy as np
from lxml import etree

from app.svg.parser import local_name

_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")

# Attributes folded by the generic scan. Names containing "x" feed the X axis.
_COORD_ATTRS = ("x", "y", "x1", "y1", "x2", "y2", "cx", "cy")


@dataclass(frozen=True)
class BoundingBox:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


DEFAULT_BOX = BoundingBox(0.0, 0.0, 100.0, 100.0)


def parse_number(value: str | None) -> float | None:
    """Lenient float parse: leading number of the string ("10px" -> 10.0), None if absent."""
    if value is None:
        return None
    m = _NUMBER_RE.match(value.strip())
    if not m:
        return None
    n = float(m.group(0))
    return n if np.isfinite(n) else None


def _numbers(text: str | None) -> list[float]:
    if not text:
        return []
    return [float(tok) for tok in _NUMBER_RE.findall(text)]


def _box(xs: list[float], ys: list[float]) -> BoundingBox:
    x = np.asarray(xs, dtype=np.float64)
    y = np.asarray(ys, dtype=np.float64)
    x = x[np.isfinite(x)]
    y = y[np.isfinite(y)]
    if x.size == 0 or y.size == 0:
        return DEFAULT_BOX
    return BoundingBox(float(x.min()), float(y.min()), float(x.max()), float(y.max()))


def _shape_attrs(element: etree._Element, names: tuple[str, ...]) -> dict[str, float] | None:
    """Numeric values for ``names``, absent ones as 0. None when none of them is present."""
    values = {name: parse_number(element.get(name)) for name in names}
    if all(v is None for v in values.values()):
        return None
    return {name: (v if v is not None else 0.0) for name, v in values.items()}


def _scan_coordinates(element: etree._Element, xs: list[float], ys: list[float]) -> None:
    for name in _COORD_ATTRS:
        value = parse_number(element.get(name))
        if value is None:
            continue
        if "x" in name:
            xs.append(value)
        else:
            ys.append(value)


def _alternating(values: list[float], xs: list[float], ys: list[float]) -> None:
    xs.extend(values[0::2])
    ys.extend(values[1::2])


def element_bounds(element: etree._Element) -> BoundingBox:
    """Estimate the extent of a single element in the document's user space."""
    tag = local_name(element)
    xs: list[float] = []
    ys: list[float] = []

    if tag == "circle":
        attrs = _shape_attrs(element, ("cx", "cy", "r"))
        if attrs is not None:
            cx, cy, r = attrs["cx"], attrs["cy"], attrs["r"]
            xs += [cx - r, cx + r]
            ys += [cy - r, cy + r]
    elif tag == "rect":
        attrs = _shape_attrs(element, ("x", "y", "width", "height"))
        if attrs is not None:
            xs += [attrs["x"], attrs["x"] + attrs["width"]]
            ys += [attrs["y"], attrs["y"] + attrs["height"]]
    elif tag == "path":
        # Ignores command letters, arcs and relative moves
        _alternating(_numbers(element.get("d")), xs, ys)
    else:
        if tag in ("polygon", "polyline"):
            _alternating(_numbers(element.get("points")), xs, ys)
        _scan_coordinates(element, xs, ys)

    return _box(xs, ys)


def group_bounds(elements: Iterable[etree._Element]) -> BoundingBox:
    """Union of element_bounds over ``elements``; the default box when empty."""
    boxes = [element_bounds(el) for el in elements]
    if not boxes:
        return DEFAULT_BOX
    arr = np.array([[b.min_x, b.min_y, b.max_x, b.max_y] for b in boxes], dtype=np.float64)
    return BoundingBox(
        float(arr[:, 0].min()),
        float(arr[:, 1].min()),
        float(arr[:, 2].max()),
        float(arr[:, 3].max()),
    )
