"""
Basic fitting shapes: infinite lines, circles, and a tagged circle-or-line.

Each shape implements signed_dist_to(point), which is how the error between
a stroke and a fitting shape is measured. signed_dist_to also accepts an
(N, 2) array of points and then returns an array of distances.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from arcspline.constants import (
    EPSILON2,
    MAX_ARC_RADIUS,
    MAX_ARC_RADIUS_TO_CHORD_LENGTH_RATIO,
    MAX_SPLINE_GAP,
)
from arcspline.geometry.vector import direction_to, norm2, rotate90, vec


@dataclass
class Line:
    """Infinite line in canonical form a*x + b*y + c = 0 with a^2 + b^2 = 1."""
    a: float
    b: float
    c: float

    @classmethod
    def from_point_and_normal(cls, point, normal):
        """Create a Line through point with the given unit normal."""
        assert abs(norm2(normal) - 1.0) <= 1e-4, "line normal must be a unit vector"
        a, b = float(normal[0]), float(normal[1])
        return cls(a, b, -(a * float(point[0]) + b * float(point[1])))

    @classmethod
    def between(cls, p0, p1):
        """Create a Line passing through both points."""
        return cls.from_point_and_normal(p0, rotate90(direction_to(p0, p1)))

    def normal(self):
        return vec(self.a, self.b)

    def signed_dist_to(self, point):
        point = np.asarray(point, dtype=np.float64)
        return point[..., 0] * self.a + point[..., 1] * self.b + self.c

    def project(self, point):
        """Projection of a point onto the line."""
        return point - self.normal() * self.signed_dist_to(point)


@dataclass
class Circle:
    x: float
    y: float
    radius: float

    def center(self):
        return vec(self.x, self.y)

    def signed_dist_to(self, point):
        point = np.asarray(point, dtype=np.float64)
        return np.hypot(point[..., 0] - self.x, point[..., 1] - self.y) - self.radius


class ShapeKind(str, Enum):
    CIRCLE = "circle"
    LINE = "line"


@dataclass
class CircleOrLine:
    """Either a Circle or a Line, tagged by kind."""
    kind: ShapeKind
    circle: Optional[Circle] = None
    line: Optional[Line] = None

    @classmethod
    def of_circle(cls, circle):
        return cls(ShapeKind.CIRCLE, circle=circle)

    @classmethod
    def of_line(cls, line):
        return cls(ShapeKind.LINE, line=line)

    @property
    def is_circle(self):
        return self.kind == ShapeKind.CIRCLE

    def signed_dist_to(self, point):
        if self.kind == ShapeKind.CIRCLE:
            return self.circle.signed_dist_to(point)
        return self.line.signed_dist_to(point)


def fit_circle_or_line(point0, tangent0, point1):
    """
    Fit the circle through point0 and point1 with the given tangent at point0.

    The center lies on the line through point0 perpendicular to tangent0,
    equidistant from point0 and the chord midpoint's projection. Falls back
    to the straight line through both points when the circle would be
    numerically unstable (huge radius or nearly collinear input), and to a
    zero-radius circle when both points coincide.
    """
    chord_norm2 = norm2(point1 - point0)
    result = None

    if chord_norm2 > EPSILON2:
        line0 = Line.from_point_and_normal(point0, -tangent0)

        mid = (point0 + point1) * 0.5
        dist = float(line0.signed_dist_to(mid))

        proj = line0.project(mid)
        lead = proj - point0
        lead_norm2 = norm2(lead)
        if lead_norm2 > EPSILON2:
            center = proj + lead * (dist * dist / lead_norm2)
            radius = math.sqrt(norm2(center - point0))
            ratio = MAX_ARC_RADIUS_TO_CHORD_LENGTH_RATIO
            if radius <= MAX_ARC_RADIUS and radius * radius < ratio * ratio * chord_norm2:
                result = CircleOrLine.of_circle(Circle(float(center[0]), float(center[1]), radius))

        if result is None:
            result = CircleOrLine.of_line(Line.between(point0, point1))
    else:
        result = CircleOrLine.of_circle(Circle(float(point0[0]), float(point0[1]), 0.0))

    assert abs(result.signed_dist_to(point0)) < MAX_SPLINE_GAP
    assert abs(result.signed_dist_to(point1)) < MAX_SPLINE_GAP
    return result
