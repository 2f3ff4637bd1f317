"""
Pydantic data models for ArcSpline results.

Fitted splines are made of shape elements, a closed set of two kinds (arc
and segment) modeled as a discriminated union. Elements and records are
shared by reference; a selection tool may hold an element while the spline
that produced it is refit.
"""

import hashlib
import math
from datetime import datetime
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from arcspline.geometry.vector import as_vec, cross, dist, dot, rotate, vec

# idx_in_biarc value for elements that are not part of a biarc
NOT_IN_BIARC = -1


class SplineArc(BaseModel):
    """
    Circular arc element.

    Angles are in degrees; the sweep is signed, positive counter-clockwise
    in a y-up frame.
    """
    kind: Literal["arc"] = "arc"
    center: List[float] = Field(..., min_length=2, max_length=2)
    radius: float = Field(..., ge=0.0)
    start_angle: float
    sweep_angle: float
    # 0 or 1 for the first or second half of a biarc; only used for display
    idx_in_biarc: int = Field(default=NOT_IN_BIARC, ge=-1, le=1)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_circle(cls, circle, p0, tangent_at_p0, p1, idx=NOT_IN_BIARC):
        """
        Create the arc of a circle from p0 to p1, leaving p0 along tangent_at_p0.
        """
        center = circle.center()
        arm0 = as_vec(p0) - center
        arm1 = as_vec(p1) - center
        start_angle = math.degrees(math.atan2(arm0[1], arm0[0]))
        end_angle = math.degrees(math.atan2(arm1[1], arm1[0]))
        sweep_angle = end_angle - start_angle

        # Sweep must follow the direction of the tangent at p0
        if cross(arm0, as_vec(tangent_at_p0)) * sweep_angle < 0.0:
            sweep_angle += 360.0 if sweep_angle < 0.0 else -360.0

        return cls(
            center=[float(center[0]), float(center[1])],
            radius=float(circle.radius),
            start_angle=start_angle,
            sweep_angle=sweep_angle,
            idx_in_biarc=idx,
        )

    @property
    def end_angle(self):
        return self.start_angle + self.sweep_angle

    def point_at_angle(self, angle_in_deg):
        return vec(*self.center) + rotate(vec(self.radius, 0.0), math.radians(angle_in_deg))

    def end_points(self):
        """Start and end points of the arc."""
        return self.point_at_angle(self.start_angle), self.point_at_angle(self.end_angle)

    def dist_to(self, point):
        """Distance from the arc to a point."""
        start = min(self.start_angle, self.end_angle)
        end = max(self.start_angle, self.end_angle)

        arm = as_vec(point) - vec(*self.center)
        angle = math.degrees(math.atan2(arm[1], arm[0]))
        if angle < start:
            angle += 360.0
        if end < angle:
            angle -= 360.0

        if start <= angle <= end:
            return abs(math.hypot(arm[0], arm[1]) - self.radius)
        return self.dist_to_end_point(point)

    def dist_to_end_point(self, point):
        """Distance from the nearer end point to a point."""
        p0, p1 = self.end_points()
        point = as_vec(point)
        return min(dist(point, p0), dist(point, p1))


class SplineSegment(BaseModel):
    """Straight segment element."""
    kind: Literal["segment"] = "segment"
    p0: List[float] = Field(..., min_length=2, max_length=2)
    p1: List[float] = Field(..., min_length=2, max_length=2)
    idx_in_biarc: int = Field(default=NOT_IN_BIARC, ge=-1, le=1)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def between(cls, p0, p1, idx=NOT_IN_BIARC):
        return cls(p0=[float(p0[0]), float(p0[1])], p1=[float(p1[0]), float(p1[1])], idx_in_biarc=idx)

    def end_points(self):
        return vec(*self.p0), vec(*self.p1)

    def dist_to(self, point):
        """Distance from the segment to a point."""
        p0, p1 = self.end_points()
        point = as_vec(point)
        u = point - p0
        v = p1 - p0

        c1 = dot(u, v)
        if c1 <= 0.0:
            return dist(point, p0)
        c2 = dot(v, v)
        if c2 <= c1:
            return dist(point, p1)
        return dist(point, p0 + (c1 / c2) * v)

    def dist_to_end_point(self, point):
        p0, p1 = self.end_points()
        point = as_vec(point)
        return min(dist(point, p0), dist(point, p1))


SplineElement = Annotated[Union[SplineArc, SplineSegment], Field(discriminator="kind")]


class SplineRecord(BaseModel):
    """Serializable result of fitting one stroke."""
    spline_id: str
    length: float = 0.0
    half_smoothing_spread: float = 10.0
    point_count: int = 0
    elements: List[SplineElement] = Field(default_factory=list)
    corners: List[List[float]] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def arc_count(self):
        return sum(1 for e in self.elements if e.kind == "arc")

    @property
    def segment_count(self):
        return sum(1 for e in self.elements if e.kind == "segment")


class SplineDocument(BaseModel):
    """Root document holding the fitted splines of one stroke file."""
    doc_id: str
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())
    source_path: str = ""
    splines: List[SplineRecord] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


# ID generation functions for deterministic outputs

def generate_spline_id(points, round_digits=2):
    """
    Generate deterministic spline ID from stroke coordinates.

    Rounds coordinates to avoid floating point instability.
    """
    if len(points) == 0:
        return "spline_empty"

    rounded = [[round(float(p[0]), round_digits), round(float(p[1]), round_digits)] for p in points]
    h = hashlib.sha256(str(rounded).encode()).hexdigest()[:12]
    return f"spline_{h}"


def generate_doc_id(source_paths):
    """
    Generate deterministic document ID from stroke file paths.
    """
    data = ":".join(sorted(source_paths))
    h = hashlib.sha256(data.encode()).hexdigest()[:16]
    return f"doc_{h}"


def compute_bbox(points):
    """
    Compute bounding box from a list of [x, y] points.

    Returns [min_x, min_y, max_x, max_y].
    """
    if len(points) == 0:
        return [0.0, 0.0, 0.0, 0.0]

    xs = [float(p[0]) for p in points]
    ys = [float(p[1]) for p in points]
    return [min(xs), min(ys), max(xs), max(ys)]
