"""Tests for preview subset extraction."""

from __future__ import annotations

import pytest

from app.errors import NoElementsFound, ParseError
from app.svg.bounds import BoundingBox
from app.svg.extractor import (
    ExtractOptions,
    dedupe_ids,
    describe_elements,
    extract_subset,
    preview_window,
)
from app.svg.parser import SVG_NS, XLINK_NS, get_element_by_id, iter_elements, local_name, parse_svg
from tests.conftest import DUAL_NS_SVG, HIGHLIGHTED_SVG, PREFIXED_SVG, SCENARIO_SVG, SCENE_SVG


def _ids(svg_text: str) -> list[str]:
    doc = parse_svg(svg_text)
    return [el.get("id") for el in iter_elements(doc.root) if el.get("id")]


# ---------------------------------------------------------------------------
# Framing
# ---------------------------------------------------------------------------

class TestViewBox:
    def test_single_circle(self, scenario_svg):
        preview, debug = extract_subset(scenario_svg, ["a"])
        root = parse_svg(preview).root
        assert root.get("viewBox") == "38 38 24 24"
        assert root.get("preserveAspectRatio") == "xMidYMid meet"
        assert debug["view_box"] == "38 38 24 24"
        assert debug["bounds"] == {"min_x": 40.0, "min_y": 40.0, "max_x": 60.0, "max_y": 60.0}

    def test_union_of_selection(self, scenario_svg):
        preview, _ = extract_subset(scenario_svg, ["a", "b"])
        # bounds 0..60, padding 6
        assert parse_svg(preview).root.get("viewBox") == "-6 -6 72 72"

    def test_zero_span_selection(self):
        svg = '<svg xmlns="http://www.w3.org/2000/svg"><text id="t" x="5" y="7">Hi</text></svg>'
        preview, _ = extract_subset(svg, ["t"])
        assert parse_svg(preview).root.get("viewBox") == "4 6 2 2"

    def test_custom_padding(self, scenario_svg):
        preview, _ = extract_subset(scenario_svg, ["a"], ExtractOptions(padding_ratio=0.5))
        assert parse_svg(preview).root.get("viewBox") == "30 30 40 40"

    def test_translate_to_origin(self, scenario_svg):
        preview, _ = extract_subset(scenario_svg, ["a"], ExtractOptions(translate_to_origin=True))
        root = parse_svg(preview).root
        assert root.get("viewBox") == "0 0 24 24"
        group = root[0]
        assert local_name(group) == "g"
        assert group.get("transform") == "translate(-38 -38)"
        assert group[0].get("id") == "a"

    def test_preview_window(self):
        assert preview_window(BoundingBox(0, 0, 10, 20), 0.1) == (-2, -2, 14, 24, 2)
        assert preview_window(BoundingBox(3, 3, 3, 3), 0.1) == (2, 2, 2, 2, 1)


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

class TestSelection:
    def test_no_ids_resolve(self, scenario_svg):
        with pytest.raises(NoElementsFound) as exc:
            extract_subset(scenario_svg, ["zzz"])
        assert exc.value.element_ids == ["zzz"]
        assert exc.value.status_code == 404

    def test_empty_selection(self, scenario_svg):
        with pytest.raises(NoElementsFound):
            extract_subset(scenario_svg, [])

    def test_missing_ids_skipped(self, scenario_svg):
        preview, debug = extract_subset(scenario_svg, ["zzz", "a"])
        assert _ids(preview) == ["a"]
        assert debug["missing"] == ["zzz"]
        assert debug["elements"][0]["found"] is True

    def test_duplicates_collapsed(self, scenario_svg):
        preview, debug = extract_subset(scenario_svg, ["a", "b", "a"])
        assert _ids(preview) == ["a", "b"]
        assert debug["requested"] == ["a", "b"]

    def test_selection_order_kept(self, scenario_svg):
        preview, _ = extract_subset(scenario_svg, ["b", "a"])
        assert _ids(preview) == ["b", "a"]

    def test_invalid_svg(self):
        with pytest.raises(ParseError):
            extract_subset("<svg><circle id='a'></svg>", ["a"])

    def test_dedupe_ids(self):
        assert dedupe_ids(["x", "y", "x", "z", "y"]) == ["x", "y", "z"]


# ---------------------------------------------------------------------------
# Content of the preview
# ---------------------------------------------------------------------------

class TestPreviewContent:
    def test_attributes_preserved(self, scene_svg):
        preview, _ = extract_subset(scene_svg, ["body", "wheel-front"])
        original = parse_svg(scene_svg)
        subset = parse_svg(preview)
        for eid in ("body", "wheel-front"):
            assert dict(get_element_by_id(subset, eid).attrib) == dict(get_element_by_id(original, eid).attrib)

    def test_only_selected_elements(self, scene_svg):
        preview, _ = extract_subset(scene_svg, ["sun"])
        assert _ids(preview) == ["sun"]
        assert "<defs" not in preview
        assert "background" not in preview

    def test_group_keeps_children(self, scene_svg):
        preview, debug = extract_subset(scene_svg, ["car"])
        assert _ids(preview) == ["car", "body", "wheel-front", "wheel-back"]
        assert debug["elements"][0]["transform"] == "translate(10 0)"

    def test_metadata_stripped(self, scene_svg):
        preview, _ = extract_subset(scene_svg, ["car"])
        assert "<title" not in preview

    def test_metadata_kept_when_asked(self, scene_svg):
        preview, _ = extract_subset(scene_svg, ["car"], ExtractOptions(strip_metadata=False))
        assert "<title>Car</title>" in preview

    def test_xlink_namespace_carried(self, scene_svg):
        preview, _ = extract_subset(scene_svg, ["sun-copy"])
        use = get_element_by_id(parse_svg(preview), "sun-copy")
        assert use.get(f"{{{XLINK_NS}}}href") == "#sun"
        assert 'xlink:href="#sun"' in preview

    def test_prefixed_attribute_carried(self, scene_svg):
        preview, _ = extract_subset(scene_svg, ["sun"])
        assert 'inkscape:label="sun"' in preview

    def test_unnamespaced_source(self, scenario_svg):
        preview, _ = extract_subset(scenario_svg, ["a"])
        assert 'xmlns=""' not in preview
        root = parse_svg(preview).root
        assert root.tag == f"{{{SVG_NS}}}svg"
        assert root[0].tag == f"{{{SVG_NS}}}circle"

    def test_dual_namespace_source(self):
        preview, _ = extract_subset(DUAL_NS_SVG, ["b"])
        assert preview.startswith("<svg ")
        assert "<svg:" not in preview
        assert parse_svg(preview).root[0].tag == f"{{{SVG_NS}}}rect"

    def test_prefixed_source(self):
        preview, _ = extract_subset(PREFIXED_SVG, ["b"])
        root = parse_svg(preview).root
        assert root.tag == f"{{{SVG_NS}}}svg"
        assert root.get("viewBox") == "-1 -1 12 12"
        assert root[0].tag == f"{{{SVG_NS}}}rect"

    def test_debug_fields(self, scene_svg):
        _, debug = extract_subset(scene_svg, ["sun", "nope"])
        assert debug["original_view_box"] == "0 0 200 120"
        assert debug["original_width"] == "200px"
        assert debug["original_height"] == "120px"
        assert debug["source_length"] == len(scene_svg)
        sun = debug["elements"][0]
        assert sun["tag"] == "circle"
        assert sun["x"] == "170"
        assert sun["y"] == "25"


class TestHighlightRestore:
    def test_marker_restored(self, highlighted_svg):
        preview, _ = extract_subset(highlighted_svg, ["dot"])
        dot = get_element_by_id(parse_svg(preview), "dot")
        assert dot.get("style") == "opacity: 0.8"
        assert dot.get("data-original-style") is None

    def test_empty_marker_drops_style(self, highlighted_svg):
        preview, _ = extract_subset(highlighted_svg, ["plain"])
        plain = get_element_by_id(parse_svg(preview), "plain")
        assert plain.get("style") is None
        assert plain.get("data-original-style") is None

    def test_no_marker_leaves_style(self, highlighted_svg):
        preview, _ = extract_subset(highlighted_svg, ["box"])
        assert get_element_by_id(parse_svg(preview), "box").get("style") == "fill: red"

    def test_original_untouched(self):
        doc = parse_svg(HIGHLIGHTED_SVG)
        extract_subset(HIGHLIGHTED_SVG, ["dot"])
        assert get_element_by_id(doc, "dot").get("data-original-style") == "opacity: 0.8"


# ---------------------------------------------------------------------------
# Prompt descriptions
# ---------------------------------------------------------------------------

class TestDescribeElements:
    def test_describe(self):
        doc = parse_svg(SCENARIO_SVG)
        assert describe_elements(doc, ["a", "b", "zzz"]) == [
            "#a (circle at x=50, y=50)",
            "#b (rect at x=0, y=0)",
            "#zzz",
        ]

    def test_describe_transform(self):
        doc = parse_svg(SCENE_SVG)
        assert describe_elements(doc, ["car"]) == ["#car (g at x=0, y=0, transform=translate(10 0))"]
