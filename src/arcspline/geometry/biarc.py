"""
Biarcs: two circular arcs joined at a shared point and tangent.

A biarc is fixed by its end points, unit tangents at both ends, and a pair
of lengths (d0, d1) along those tangents that place two internal control
points q0 and q1. The arcs meet on the segment q0-q1.

This implementation only handles positive d0, d1, or d1 == 0 for the
degenerate single-arc case. Distances are measured to the full circles or
lines that carry each half, not to the arcs themselves.

See http://www.ryanjuckett.com/programming/biarc-interpolation/
"""

import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from arcspline.constants import EPSILON, MAX_D_PARAM
from arcspline.geometry.shapes import CircleOrLine, Line, fit_circle_or_line
from arcspline.geometry.vector import TINY, direction_to, dot, interpolate


@dataclass(frozen=True)
class DParam:
    """Lengths along tangent0 and tangent1 to the internal control points."""
    d0: float
    d1: float

    @property
    def is_single_arc(self):
        return self.d1 == 0.0


def biarc_ratios(r_lower, r_upper, num_results):
    """
    Ratio values r = d0 / d1 in a geometric series from r_lower to r_upper.

    A single requested sample always uses the balanced ratio r = 1.
    """
    if num_results <= 1:
        return [1.0] * max(num_results, 0)
    multiplier = math.pow(r_upper / r_lower, 1.0 / (num_results - 1 + EPSILON))
    return [r_lower * multiplier ** i for i in range(num_results)]


def solve_d1(point0, tangent0, point1, tangent1, r):
    """
    Solve the biarc closed form for d1 at ratio r.

    Solves a*x^2 + b*x + c = 0 and returns the larger root, or the linear
    root when a is ~0 (tangents parallel). Returns None when no positive
    solution below MAX_D_PARAM exists.
    """
    v = point1 - point0
    t = r * tangent0 + tangent1

    a = r * (1.0 - dot(tangent0, tangent1))
    b = dot(v, t)
    c = -0.5 * dot(v, v)

    if abs(a) > EPSILON:
        delta = b * b - 4.0 * a * c
        if delta < 0.0:
            return None
        delta_sqrt = math.sqrt(delta)
        d1 = max((-b - delta_sqrt) / (2.0 * a), (-b + delta_sqrt) / (2.0 * a))
    elif abs(b) > TINY:
        d1 = -c / b
    else:
        return None

    if EPSILON < d1 < MAX_D_PARAM:
        return d1
    return None


def single_arc_d0(point0, tangent0, point1):
    """
    d0 of the degenerate biarc that is one arc from point0 to point1.

    Negative values describe arcs over 180 degrees. Returns None when the
    arc is undefined (end point on the normal through point0).
    """
    v = point1 - point0
    along = dot(v, tangent0)
    if abs(along) <= TINY:
        return None
    d0 = dot(v, v) / (2.0 * along)
    if abs(d0) <= EPSILON:
        return None
    return d0


def find_possible_biarc_params(point0, tangent0, point1, tangent1,
                               r_lower, r_upper, num_results, add_single_arc_result):
    """
    Collect feasible (d0, d1) pairs for given end points and tangents.

    One pair per ratio r that has a solution, plus optionally the degenerate
    single-arc pair with d1 == 0, which breaks tangent continuity at the end
    and so is only valid for the last biarc of a section.

    Returns:
        list of DParam
    """
    result = []
    for r in biarc_ratios(r_lower, r_upper, num_results):
        d1 = solve_d1(point0, tangent0, point1, tangent1, r)
        if d1 is not None:
            result.append(DParam(r * d1, d1))

    if add_single_arc_result:
        d0 = single_arc_d0(point0, tangent0, point1)
        if d0 is not None:
            result.append(DParam(d0, 0.0))

    return result


@dataclass
class Biarc:
    """
    Biarc between (point0, tangent0) and (point1, tangent1).

    Cached shapes are computed on construction: the circle or line carrying
    each half, and the dividing line through the mid point that decides
    which half a query point is measured against.
    """
    point0: np.ndarray
    tangent0: np.ndarray
    point1: np.ndarray
    tangent1: np.ndarray
    param: DParam
    shape0: Optional[CircleOrLine] = field(default=None, init=False, repr=False)
    shape1: Optional[CircleOrLine] = field(default=None, init=False, repr=False)
    div_line: Optional[Line] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        assert 0.0 <= self.param.d1
        self.calc_cached_shapes()

    def q0(self):
        return self.point0 + self.tangent0 * self.param.d0

    def q1(self):
        return self.point1 - self.tangent1 * self.param.d1

    def mid_point(self):
        """Point where the two arcs meet."""
        d0, d1 = self.param.d0, self.param.d1
        return interpolate(self.q0(), self.q1(), d0 / (d0 + d1 + TINY))

    def mid_tangent(self):
        assert 0.0 <= self.param.d0 or 0.0 == self.param.d1
        return direction_to(self.q0(), self.q1())

    def end_tangent(self):
        """
        Curve tangent at point1.

        Equals tangent1 unless this is a single arc, whose end tangent is
        tangent0 mirrored across the chord.
        """
        if not self.param.is_single_arc:
            return self.tangent1
        chord = direction_to(self.point0, self.point1)
        return 2.0 * dot(self.tangent0, chord) * chord - self.tangent0

    def calc_cached_shapes(self):
        mid_point = self.mid_point()
        self.shape0 = fit_circle_or_line(self.point0, self.tangent0, mid_point)
        self.shape1 = fit_circle_or_line(self.point1, self.tangent1, mid_point)
        self.div_line = Line.from_point_and_normal(mid_point, self.mid_tangent())

    def signed_dist_to(self, point):
        """
        Signed distance to the half-shape on the query point's side.

        The first shape is always used for a single-arc biarc, since its
        second shape is a zero-radius circle.
        """
        side = self.div_line.signed_dist_to(self.point0) * self.div_line.signed_dist_to(point)
        side = side * self.param.d1
        return np.where(side >= 0.0,
                        self.shape0.signed_dist_to(point),
                        self.shape1.signed_dist_to(point))
