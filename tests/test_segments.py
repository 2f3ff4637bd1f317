"""Tests for segment classification."""

import pytest

from arcspline.config import SegmentsConfig
from arcspline.geometry.ranges import Range
from arcspline.geometry.shapes import Line
from arcspline.geometry.vector import vec
from arcspline.strokes.polyline import ParametrizedPolyline
from arcspline.strokes.segments import calc_mean_squared_error, is_segment


def bump_line(height):
    """A 100-unit stroke with a triangular bump of the given height in the middle."""
    points = [[0.0, 0.0], [40.0, 0.0], [50.0, height], [60.0, 0.0], [100.0, 0.0]]
    return ParametrizedPolyline.from_points(points)


class TestMeanSquaredError:
    """Tests for calc_mean_squared_error."""

    def test_zero_on_the_line(self, straight_line):
        shape = Line.between(vec(0, 0), vec(100, 0))

        assert calc_mean_squared_error(straight_line, 0.0, 10.0, 100.0, shape) == 0.0

    def test_constant_offset(self, straight_line):
        shape = Line.between(vec(0, 3), vec(100, 3))

        assert calc_mean_squared_error(straight_line, 0.0, 10.0, 100.0, shape) == pytest.approx(9.0)

    def test_no_samples(self, straight_line):
        shape = Line.between(vec(0, 3), vec(100, 3))

        assert calc_mean_squared_error(straight_line, 50.0, 10.0, 50.0, shape) == 0.0


class TestIsSegment:
    """Tests for is_segment."""

    def test_straight_stroke_is_segment(self, straight_line):
        accepted, error = is_segment(straight_line, Range(0.0, 100.0), SegmentsConfig())

        assert accepted
        assert error == pytest.approx(0.0)

    def test_arc_is_not_segment(self, arc_line):
        accepted, error = is_segment(arc_line, Range(0.0, arc_line.length()), SegmentsConfig())

        assert not accepted
        assert error > 100.0

    def test_small_bump_is_segment(self):
        line = bump_line(1.0)

        accepted, _ = is_segment(line, Range(0.0, line.length()), SegmentsConfig())

        assert accepted

    def test_acceptance_is_monotonic_in_error(self):
        """A flatter bump of the same chord is accepted whenever a taller one is."""
        config = SegmentsConfig()
        results = []
        for height in [0.0, 2.0, 4.0, 8.0, 16.0, 32.0]:
            line = bump_line(height)
            accepted, error = is_segment(line, Range(0.0, line.length()), config)
            results.append((error, accepted))

        errors = [e for e, _ in results]
        assert errors == sorted(errors)
        flags = [a for _, a in results]
        assert flags[0]
        assert not flags[-1]
        assert flags == sorted(flags, reverse=True)

    def test_allowed_error_scales_with_chord(self):
        """The same mean error passes on a long chord and fails on a short one."""
        config = SegmentsConfig(t_step=1.0)
        offset = 3.0
        short = ParametrizedPolyline.from_points(
            [[0.0, 0.0]] + [[float(x), offset] for x in range(1, 10)] + [[10.0, 0.0]]
        )
        long = ParametrizedPolyline.from_points(
            [[0.0, 0.0]] + [[float(x), offset] for x in range(1, 200)] + [[200.0, 0.0]]
        )

        short_ok, short_error = is_segment(short, Range(0.0, short.length()), config)
        long_ok, long_error = is_segment(long, Range(0.0, long.length()), config)

        assert not short_ok
        assert long_ok

    def test_closed_loop_is_not_segment(self):
        line = ParametrizedPolyline.from_points([[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]])

        accepted, error = is_segment(line, Range(0.0, line.length()), SegmentsConfig())

        assert not accepted
        assert error == float("inf")

    def test_bounds_outside_line_assert(self, straight_line):
        with pytest.raises(AssertionError):
            is_segment(straight_line, Range(0.0, 150.0), SegmentsConfig())
