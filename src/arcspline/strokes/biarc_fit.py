"""
Biarc spline fitting for line sections.

Converts a section of a ParametrizedPolyline into a series of biarcs.
Starting at the beginning of the section, it fits the longest and 'nicest'
biarc that stays within the allowed mean squared error, then continues
from that biarc's end point and tangent until the section end.

A biarc is unique given its end points, end tangents and the ratio of its
two d parameters, so several ratios are tried for every candidate end
point. Longer biarcs are rejected when the extra length costs a relatively
large increase in error, except when a biarc reaches the section end. The
final biarc of a section may degenerate into a single arc, which avoids
oddly short closing arcs.
"""

import math
from dataclasses import dataclass

import numpy as np

from arcspline.constants import EPSILON, MAX_SPLINE_GAP
from arcspline.geometry.biarc import Biarc, DParam, find_possible_biarc_params
from arcspline.geometry.vector import angle_to, dot, norm, normalized
from arcspline.strokes.polyline import sample_ts
from arcspline.tracer import get_tracer, trace


@dataclass
class BiarcCandidate:
    """A fitted biarc together with its error and the t where it ends."""
    biarc: Biarc
    error: float
    t_end: float


def biarc_mean_squared_error(biarc, sample_points):
    """Mean squared signed distance from sample points to a biarc."""
    if len(sample_points) == 0:
        return 0.0
    distances = biarc.signed_dist_to(sample_points)
    return float((distances * distances).mean())


def biarc_curve_mid_point(biarc):
    """
    The point halfway along the biarc's curve.

    For a single arc this is the middle of the arc, found from the circle
    center, rather than the biarc's mid point, which sits at the end.
    """
    if biarc.param.is_single_arc and biarc.shape0.is_circle:
        circle = biarc.shape0.circle
        center = circle.center()
        offset = normalized(biarc.point0 + biarc.point1 - 2.0 * center) * circle.radius
        if 0.0 <= dot(biarc.point1 - biarc.point0, biarc.tangent0):
            return center + offset
        return center - offset
    return biarc.mid_point()


def min_dist_to_biarc_mid_point(line, t_start, t_step, t_end, biarc):
    """
    Distance between the biarc's curve mid point and the nearest line sample.

    Used to catch biarcs that fit the sampled points but bulge away from
    the line between them.
    """
    ts = sample_ts(t_start, t_step, t_end)
    if len(ts) == 0:
        return 0.0
    offsets = line.points_at(ts) - biarc_curve_mid_point(biarc)
    return float(np.sqrt(np.min(np.einsum("ij,ij->i", offsets, offsets))))


def end_angle_error(biarc, line_tangent):
    """Angle in degrees between the biarc's end tangent and the line's tangent."""
    return abs(math.degrees(angle_to(biarc.end_tangent(), line_tangent)))


def _ratio_distance(param):
    if param.d1 == 0.0:
        return 0.0
    return abs(math.log(param.d0 / param.d1))


def _evaluate_trial(line, biarcs_config, t0, point0, tangent0, t, at_end, sample_points):
    """
    Fit every candidate biarc ending at t.

    A two-arc candidate is feasible when its mean squared error is within
    max_mean_error. The degenerate single arc, offered only at the section
    end, is judged by its end tangent instead: it is feasible when the angle
    to the stroke tangent is within the end angle tolerance.

    Returns:
        (feasible candidates in order of preference, lowest-error candidate or None)
    """
    bounds = line.get_bounds()
    point1 = line.point_at(t)
    tangent1 = line.tangent_at(t)

    params = find_possible_biarc_params(
        point0, tangent0, point1, tangent1,
        biarcs_config.min_biarc_ratio,
        biarcs_config.max_biarc_ratio,
        biarcs_config.num_biarc_ratio_samples,
        at_end and biarcs_config.allow_half_arc_at_section_end,
    )

    end_tolerance = biarcs_config.end_angle_tolerance
    if t0 == bounds.start and biarcs_config.allow_extra_tolerance_for_single_arc_sections:
        end_tolerance = biarcs_config.end_angle_tolerance_for_single_arc_section

    single_arcs = []
    biarcs = []
    lowest = None
    for param in params:
        biarc = Biarc(point0, tangent0, point1, tangent1, param)
        candidate = BiarcCandidate(biarc, biarc_mean_squared_error(biarc, sample_points), t)

        if lowest is None or candidate.error < lowest.error:
            lowest = candidate

        if param.is_single_arc:
            if end_angle_error(biarc, tangent1) <= end_tolerance:
                single_arcs.append(candidate)
        elif candidate.error <= biarcs_config.max_mean_error:
            biarcs.append(candidate)

    biarcs.sort(key=lambda c: (c.error, _ratio_distance(c.biarc.param)))
    return single_arcs + biarcs, lowest


def _accepts_longer(best, candidate, biarcs_config, bounds):
    """Balancing rule: a longer biarc must not grow the error disproportionately."""
    if candidate.t_end >= bounds.end - biarcs_config.end_of_line_okay_factor * biarcs_config.t_step:
        return True
    reference = max(best.error, biarcs_config.min_balanced_error)
    return candidate.error <= reference * biarcs_config.dist_to_error_threshold


def _mid_point_ok(line, biarcs_config, t0, candidate):
    distance = min_dist_to_biarc_mid_point(
        line, t0, biarcs_config.mid_point_t_step, candidate.t_end + EPSILON, candidate.biarc
    )
    return distance <= biarcs_config.max_dist_to_mid_point


def straight_biarc(point0, tangent0, point1):
    """
    A fallback biarc running straight along the chord.

    Only used when no biarc parameters can be solved at all, so a fit
    always makes progress.
    """
    chord = point1 - point0
    length = norm(chord)
    if length > EPSILON:
        return Biarc(point0, chord / length, point1, chord / length, DParam(length / 3.0, length / 3.0))
    return Biarc(point0, tangent0, point1, tangent0, DParam(1.0, 1.0))


def _next_trial_t(t, t_step, bounds):
    t = min(t + t_step, bounds.end)
    if bounds.end - t < MAX_SPLINE_GAP:
        t = bounds.end
    return t


def fit_next_biarc(line, biarcs_config, t0, point0, tangent0):
    """
    Find the best biarc starting at t0 with the given point and tangent.

    Trial end points move outward in t_step increments until a trial has
    no feasible candidate or the section end is reached.

    Returns:
        BiarcCandidate
    """
    bounds = line.get_bounds()
    sample_t = sample_ts(t0, biarcs_config.t_step, bounds.end)
    sample_points = line.points_at(sample_t)

    best = None
    first_lowest = None
    t = t0
    while t < bounds.end:
        t = _next_trial_t(t, biarcs_config.t_step, bounds)
        at_end = t >= bounds.end
        count = int(np.searchsorted(sample_t, t, side="left"))

        feasible, lowest = _evaluate_trial(
            line, biarcs_config, t0, point0, tangent0, t, at_end, sample_points[:count]
        )
        if first_lowest is None:
            first_lowest = lowest

        if not feasible:
            break

        for candidate in feasible:
            if best is not None and not _accepts_longer(best, candidate, biarcs_config, bounds):
                continue
            if _mid_point_ok(line, biarcs_config, t0, candidate):
                best = candidate
                break

    if best is None:
        if first_lowest is not None:
            best = first_lowest
        else:
            t_end = _next_trial_t(t0, biarcs_config.t_step, bounds)
            best = BiarcCandidate(straight_biarc(point0, tangent0, line.point_at(t_end)), math.inf, t_end)
        get_tracer().event("No feasible biarc, forcing progress", level="WARN",
                           t_start=t0, t_end=best.t_end)

    return best


@trace(label="convert_line_to_biarcs", arg_names=["line"])
def convert_line_to_biarcs(line, biarcs_config):
    """
    Convert the line section within the line's bounds into biarcs.

    Args:
        line: ParametrizedPolyline with bounds set to the section
        biarcs_config: BiarcsConfig

    Returns:
        ordered list of Biarc objects covering the section end to end
    """
    tracer = get_tracer()
    bounds = line.get_bounds()

    result = []
    t0 = bounds.start
    point0 = line.point_at(t0)
    tangent0 = line.tangent_at(t0)

    while bounds.end - t0 > MAX_SPLINE_GAP:
        best = fit_next_biarc(line, biarcs_config, t0, point0, tangent0)
        result.append(best.biarc)
        tracer.event("Fitted biarc", level="DEBUG", t_start=t0, t_end=best.t_end, error=best.error)

        if best.biarc.param.is_single_arc:
            break
        t0 = best.t_end
        point0 = best.biarc.point1
        tangent0 = best.biarc.end_tangent()

    tracer.event(f"Section fitted with {len(result)} biarcs", bounds=bounds)

    return result
