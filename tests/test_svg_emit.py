"""Tests for SVG export."""

from arcspline.config import StrokeConfig
from arcspline.export.svg_emit import (
    arc_to_svg_path,
    emit_splines_svg,
    polyline_to_svg_path,
    segment_to_svg_path,
)
from arcspline.models import SplineArc, SplineSegment
from arcspline.spline import ArcSpline


class TestPaths:
    """Tests for path string generation."""

    def test_segment_path(self):
        path = segment_to_svg_path(SplineSegment.between([0, 0], [10, 5]))

        assert path == "M 0.000 0.000 L 10.000 5.000"

    def test_arc_path_has_two_halves(self):
        arc = SplineArc(center=[0.0, 0.0], radius=10.0, start_angle=0.0, sweep_angle=90.0)

        path = arc_to_svg_path(arc)

        assert path.startswith("M 10.000 0.000")
        assert path.count("A 10.000 10.000 0 0 1") == 2
        assert path.endswith("0.000 10.000")

    def test_negative_sweep_flag(self):
        arc = SplineArc(center=[0.0, 0.0], radius=10.0, start_angle=0.0, sweep_angle=-90.0)

        assert "A 10.000 10.000 0 0 0" in arc_to_svg_path(arc)

    def test_polyline_path(self):
        assert polyline_to_svg_path([[0, 0], [1, 2]]) == "M 0.000 0.000 L 1.000 2.000"
        assert polyline_to_svg_path([]) == ""


class TestEmitSplinesSvg:
    """Tests for whole drawings."""

    def test_drawing_contains_elements_and_corners(self, l_shape_line):
        record = ArcSpline(l_shape_line).to_record()

        svg = emit_splines_svg([record], StrokeConfig()).tostring()

        assert svg.count('class="segment"') == 2
        assert "<circle" in svg
        assert record.spline_id in svg

    def test_source_lines_drawn_when_given(self, arc_line):
        spline = ArcSpline(arc_line)

        svg = emit_splines_svg([spline.to_record()], StrokeConfig(),
                               source_points=[spline.source_line.points()]).tostring()

        assert 'id="source"' in svg
        assert 'class="arc"' in svg

    def test_empty_drawing(self):
        svg = emit_splines_svg([], StrokeConfig()).tostring()

        assert "<svg" in svg
