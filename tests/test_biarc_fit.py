"""Tests for biarc spline fitting."""

import math

import numpy as np
import pytest

from arcspline.config import BiarcsConfig
from arcspline.constants import MAX_SPLINE_GAP
from arcspline.geometry.biarc import Biarc, DParam
from arcspline.geometry.ranges import Range
from arcspline.geometry.vector import normalized, vec
from arcspline.strokes.biarc_fit import (
    BiarcCandidate,
    biarc_curve_mid_point,
    convert_line_to_biarcs,
    end_angle_error,
    fit_next_biarc,
    min_dist_to_biarc_mid_point,
    straight_biarc,
    _accepts_longer,
    _evaluate_trial,
    _mid_point_ok,
)
from arcspline.strokes.polyline import ParametrizedPolyline, sample_ts


def fit_whole_line(line, config=None):
    line.set_bounds(Range(0.0, line.length()))
    return convert_line_to_biarcs(line, config or BiarcsConfig())


class TestConvertLineToBiarcs:
    """Tests for convert_line_to_biarcs."""

    def test_constant_curvature_gives_single_arc(self, arc_line):
        biarcs = fit_whole_line(arc_line)

        assert len(biarcs) == 1
        biarc = biarcs[0]
        assert biarc.param.is_single_arc
        assert biarc.shape0.is_circle
        assert abs(biarc.shape0.circle.radius - 40.0) < 2.5

    def test_biarcs_are_chained(self, wave_points):
        line = ParametrizedPolyline.from_points(wave_points)
        biarcs = fit_whole_line(line)

        assert len(biarcs) >= 1
        assert np.allclose(biarcs[0].point0, wave_points[0])
        for prev, nxt in zip(biarcs, biarcs[1:]):
            assert np.allclose(prev.point1, nxt.point0)
            assert np.allclose(prev.end_tangent(), nxt.tangent0)
        assert np.linalg.norm(biarcs[-1].point1 - np.array(wave_points[-1])) <= MAX_SPLINE_GAP

    def test_only_last_biarc_may_be_single_arc(self, wave_points):
        line = ParametrizedPolyline.from_points(wave_points)
        biarcs = fit_whole_line(line)

        assert not any(b.param.is_single_arc for b in biarcs[:-1])

    def test_tight_error_needs_more_biarcs(self, wave_points):
        line = ParametrizedPolyline.from_points(wave_points)
        loose = fit_whole_line(line.copy(), BiarcsConfig(max_mean_error=50.0))
        tight = fit_whole_line(line.copy(), BiarcsConfig(max_mean_error=0.5))

        assert len(tight) >= len(loose)

    def test_fitted_biarcs_stay_close_to_line(self, wave_points):
        line = ParametrizedPolyline.from_points(wave_points)
        biarcs = fit_whole_line(line)

        samples = line.points_at(np.arange(0.0, line.length(), 5.0))
        distances = np.min(np.abs(np.stack([b.signed_dist_to(samples) for b in biarcs])), axis=0)
        assert float(np.sqrt(np.mean(distances * distances))) < math.sqrt(BiarcsConfig().max_mean_error)

    def test_sub_range(self, wave_points):
        """Only the bounded section is fitted."""
        line = ParametrizedPolyline.from_points(wave_points)
        line.set_bounds(Range(40.0, 120.0))
        biarcs = convert_line_to_biarcs(line, BiarcsConfig())

        assert np.allclose(biarcs[0].point0, line.point_at(40.0))
        assert np.linalg.norm(biarcs[-1].point1 - line.point_at(120.0)) <= MAX_SPLINE_GAP

    def test_section_shorter_than_gap_gives_nothing(self, straight_line):
        straight_line.set_bounds(Range(10.0, 10.5))

        assert convert_line_to_biarcs(straight_line, BiarcsConfig()) == []

    def test_always_terminates_on_hairpin(self):
        """A stroke that doubles back on itself still gets fitted."""
        points = [[float(x), 0.0] for x in range(41)] + [[float(x), 0.5] for x in range(40, -1, -1)]
        line = ParametrizedPolyline.from_points(points)

        biarcs = fit_whole_line(line)

        assert len(biarcs) >= 1
        assert np.allclose(biarcs[0].point0, [0.0, 0.0])


class TestHelpers:
    """Tests for fitting helpers."""

    def test_mid_point_distance_on_matching_arc(self, arc_line):
        biarc = fit_whole_line(arc_line)[0]

        distance = min_dist_to_biarc_mid_point(arc_line, 0.0, 1.0, arc_line.length(), biarc)

        assert distance < 2.0

    def test_curve_mid_point_of_single_arc(self):
        """The curve mid point of a quarter arc is halfway around it."""
        biarc = Biarc(vec(10, 0), vec(0, 1), vec(0, 10), vec(-1, 0), DParam(10.0, 0.0))

        expected = 10.0 * np.array([math.cos(math.pi / 4), math.sin(math.pi / 4)])
        assert np.allclose(biarc_curve_mid_point(biarc), expected)

    def test_end_angle_error(self):
        biarc = Biarc(vec(10, 0), vec(0, 1), vec(0, 10), vec(-1, 0), DParam(10.0, 0.0))

        assert end_angle_error(biarc, vec(-1, 0)) == pytest.approx(0.0, abs=1e-9)
        assert end_angle_error(biarc, vec(0, -1)) == pytest.approx(90.0)

    def test_straight_biarc_runs_along_chord(self):
        biarc = straight_biarc(vec(0, 0), vec(0, 1), vec(30, 0))

        assert not biarc.param.is_single_arc
        assert np.allclose(biarc.tangent0, [1.0, 0.0])
        assert float(biarc.signed_dist_to(vec(15, 0))) == pytest.approx(0.0, abs=1e-9)


def evaluate_whole_section(line, config):
    """Evaluate the trial that spans the whole line, as the last trial of a section."""
    length = line.length()
    line.set_bounds(Range(0.0, length))
    sample_points = line.points_at(sample_ts(0.0, config.t_step, length))
    return _evaluate_trial(line, config, 0.0, line.point_at(0.0), line.tangent_at(0.0),
                           length, True, sample_points)


@pytest.fixture
def parabola_line():
    """y = x^2 / 100: the end tangent is about 24 degrees off a single arc's."""
    points = [[float(x), x * x / 100.0] for x in range(101)]
    return ParametrizedPolyline.from_points(points, half_smoothing_spread=2.0)


class TestSingleArcAtSectionEnd:
    """Tests for the degenerate single arc closing a section."""

    def test_judged_by_end_angle_not_error(self, arc_line):
        config = BiarcsConfig(max_mean_error=1e-6)

        feasible, _ = evaluate_whole_section(arc_line, config)

        assert feasible
        assert feasible[0].biarc.param.is_single_arc
        assert feasible[0].error > config.max_mean_error

    def test_rejected_when_end_angle_too_large(self, parabola_line):
        feasible, _ = evaluate_whole_section(parabola_line, BiarcsConfig())

        assert not any(c.biarc.param.is_single_arc for c in feasible)

    def test_extra_tolerance_for_whole_section(self, parabola_line):
        config = BiarcsConfig(allow_extra_tolerance_for_single_arc_sections=True)

        feasible, _ = evaluate_whole_section(parabola_line, config)

        assert feasible[0].biarc.param.is_single_arc
        assert 15.0 < end_angle_error(feasible[0].biarc, parabola_line.tangent_at(parabola_line.length())) < 45.0

    def test_extra_tolerance_only_from_section_start(self, parabola_line):
        config = BiarcsConfig(allow_extra_tolerance_for_single_arc_sections=True)
        length = parabola_line.length()
        parabola_line.set_bounds(Range(0.0, length))
        sample_points = parabola_line.points_at(sample_ts(0.0, config.t_step, length))

        feasible, _ = _evaluate_trial(parabola_line, config, 10.0, parabola_line.point_at(0.0),
                                      parabola_line.tangent_at(0.0), length, True, sample_points)

        assert not any(c.biarc.param.is_single_arc for c in feasible)

    def test_not_offered_before_section_end(self, arc_line):
        config = BiarcsConfig()
        length = arc_line.length()
        arc_line.set_bounds(Range(0.0, length))
        sample_points = arc_line.points_at(sample_ts(0.0, config.t_step, length))

        feasible, _ = _evaluate_trial(arc_line, config, 0.0, arc_line.point_at(0.0),
                                      arc_line.tangent_at(0.0), length, False, sample_points)

        assert not any(c.biarc.param.is_single_arc for c in feasible)


class TestBalancing:
    """Tests for the rule trading biarc length against error growth."""

    def candidate(self, error, t_end):
        return BiarcCandidate(straight_biarc(vec(0, 0), vec(1, 0), vec(30, 0)), error, t_end)

    def test_disproportionate_error_growth_rejected(self):
        bounds = Range(0.0, 300.0)
        best = self.candidate(2.0, 30.0)

        assert _accepts_longer(best, self.candidate(2.01, 45.0), BiarcsConfig(), bounds)
        assert not _accepts_longer(best, self.candidate(2.5, 45.0), BiarcsConfig(), bounds)

    def test_small_errors_count_as_equal(self):
        bounds = Range(0.0, 300.0)
        best = self.candidate(0.0, 30.0)

        assert _accepts_longer(best, self.candidate(0.2, 45.0), BiarcsConfig(), bounds)
        assert not _accepts_longer(best, self.candidate(0.3, 45.0), BiarcsConfig(), bounds)

    def test_suspended_at_section_end(self):
        bounds = Range(0.0, 300.0)
        best = self.candidate(1.0, 270.0)

        assert _accepts_longer(best, self.candidate(9.0, 300.0), BiarcsConfig(), bounds)

    def test_suspended_within_end_of_line_factor(self):
        bounds = Range(0.0, 300.0)
        config = BiarcsConfig(end_of_line_okay_factor=1.0)
        best = self.candidate(1.0, 250.0)

        assert _accepts_longer(best, self.candidate(9.0, 290.0), config, bounds)
        assert not _accepts_longer(best, self.candidate(9.0, 280.0), config, bounds)

    def test_strict_balancing_never_reaches_farther(self, wave_points):
        line = ParametrizedPolyline.from_points(wave_points)
        line.set_bounds(Range(0.0, line.length()))
        start, tangent = line.point_at(0.0), line.tangent_at(0.0)

        strict = fit_next_biarc(line, BiarcsConfig(dist_to_error_threshold=1.0, min_balanced_error=0.0),
                                0.0, start, tangent)
        loose = fit_next_biarc(line, BiarcsConfig(dist_to_error_threshold=1e6), 0.0, start, tangent)

        assert strict.t_end <= loose.t_end


class TestMidPointCheck:
    """Tests for rejecting biarcs that bulge away from the stroke."""

    def test_bulging_arc_rejected(self, straight_line):
        # Quarter arc from (0, 0) to (40, 0), its middle about 8.3 above the stroke
        biarc = Biarc(vec(0, 0), normalized(vec(1, 1)), vec(40, 0), vec(1, -1) / math.sqrt(2.0),
                      DParam(20.0 * math.sqrt(2.0), 0.0))
        candidate = BiarcCandidate(biarc, 0.0, 40.0)

        assert biarc_curve_mid_point(biarc)[1] == pytest.approx(20.0 * math.sqrt(2.0) - 20.0)
        assert not _mid_point_ok(straight_line, BiarcsConfig(), 0.0, candidate)
        assert _mid_point_ok(straight_line, BiarcsConfig(max_dist_to_mid_point=10.0), 0.0, candidate)
