"""
Spline assembly for freeform strokes.

An ArcSpline turns a ParametrizedPolyline into display shapes:
1. Find corners over the whole line
2. Test the spans between consecutive corners as straight segments
3. Fit biarc splines into every remaining gap between markers
4. Emit arcs and segments in stroke order, plus the corner points
"""

from arcspline.config import ProcessingInput
from arcspline.constants import MAX_SPLINE_GAP
from arcspline.geometry.ranges import Range
from arcspline.geometry.shapes import ShapeKind
from arcspline.geometry.vector import dist
from arcspline.models import SplineArc, SplineRecord, SplineSegment, generate_spline_id
from arcspline.strokes.biarc_fit import convert_line_to_biarcs
from arcspline.strokes.corners import find_corners
from arcspline.strokes.segments import is_segment
from arcspline.tracer import get_tracer, trace


def shape_element(shape, p0, tangent_at_p0, p1, idx):
    """Create an arc or segment element for one half of a biarc."""
    if shape.kind == ShapeKind.CIRCLE:
        return SplineArc.from_circle(shape.circle, p0, tangent_at_p0, p1, idx)
    return SplineSegment.between(p0, p1, idx)


def biarc_elements(biarc):
    """
    Display elements for a biarc.

    A half is skipped when its end points are closer than MAX_SPLINE_GAP,
    which drops the empty second half of a single arc.
    """
    elements = []
    mid_point = biarc.mid_point()
    if MAX_SPLINE_GAP <= dist(biarc.point0, mid_point):
        elements.append(shape_element(biarc.shape0, biarc.point0, biarc.tangent0, mid_point, 0))
    if MAX_SPLINE_GAP <= dist(biarc.point1, mid_point):
        elements.append(shape_element(biarc.shape1, mid_point, biarc.mid_tangent(), biarc.point1, 1))
    return elements


class ArcSpline:
    """
    Fitted spline of a source line.

    The source line and processing input are shared, never modified here:
    fitting works on a copy of the line. display_shapes and debug_corners
    are replaced as a whole by every recreate_spline() call, so elements
    handed out earlier stay valid for their holders.
    """

    def __init__(self, line, processing_input=None):
        self.source_line = line
        self.processing_input = processing_input if processing_input is not None else ProcessingInput()
        self.display_shapes = []
        self.debug_corners = []
        self.recreate_spline()

    def __repr__(self):
        return (f"ArcSpline(shapes={len(self.display_shapes)}, corners={len(self.debug_corners)}, "
                f"length={self.source_line.length():.2f})")

    @trace(label="recreate_spline")
    def recreate_spline(self, processing_input=None):
        """
        Refit the spline, optionally switching to another processing input.
        """
        if processing_input is not None:
            self.processing_input = processing_input
        self.processing_input.validate()

        line = self.source_line.copy()
        markers = self.find_corners_and_segments(line)
        display_shapes, debug_corners = self.generate_biarcs_and_final_shapes(line, markers)

        self.display_shapes = display_shapes
        self.debug_corners = debug_corners

    def find_corners_and_segments(self, line):
        """
        Find corners and the straight segments connecting them.

        Args:
            line: working copy of the source line; its bounds are reset

        Returns:
            list of Range markers sorted by (start, end); corners have zero length
        """
        tracer = get_tracer()

        line.set_bounds(Range(0.0, line.length()))
        corners = find_corners(line, self.processing_input.corners)

        segments = []
        terminal = Range(line.length(), line.length())
        prev_corner = 0.0
        for corner in corners + [terminal]:
            span = Range(prev_corner, corner.start)
            if MAX_SPLINE_GAP < span.length():
                accepted, mean_error2 = is_segment(line, span, self.processing_input.segments)
                if accepted:
                    segments.append(span)
                tracer.event("Segment test", level="DEBUG", span=span, accepted=accepted, error=mean_error2)
            prev_corner = corner.end

        tracer.event(f"Found {len(corners)} corners and {len(segments)} segments")

        return sorted(corners + segments)

    @trace(label="generate_biarcs_and_final_shapes", arg_names=["markers"])
    def generate_biarcs_and_final_shapes(self, line, markers):
        """
        Fit biarcs between markers and build the display shapes.

        Args:
            line: working copy of the source line; its bounds are changed
            markers: sorted list of corner and segment ranges

        Returns:
            (display_shapes, debug_corners) tuple
        """
        display_shapes = []
        debug_corners = []

        # Terminal marker so the gap after the last marker is fitted too
        terminal = Range(line.length(), line.length() + 1.0)

        prev_end = 0.0
        for marker in markers + [terminal]:
            gap = Range(prev_end, marker.start)
            assert gap.is_valid(), f"overlapping markers at t={marker.start}"

            if gap.length() > MAX_SPLINE_GAP:
                line.set_bounds(gap)
                for biarc in convert_line_to_biarcs(line, self.processing_input.biarcs):
                    display_shapes.extend(biarc_elements(biarc))

            if marker.length() > MAX_SPLINE_GAP:
                display_shapes.append(
                    SplineSegment.between(line.point_at(marker.start), line.point_at(marker.end))
                )
            elif marker.length() == 0.0:
                debug_corners.append(line.point_at(marker.start))

            prev_end = marker.end

        return display_shapes, debug_corners

    def to_record(self):
        """Serializable summary of the fit."""
        points = self.source_line.points()
        return SplineRecord(
            spline_id=generate_spline_id(points),
            length=self.source_line.length(),
            half_smoothing_spread=self.source_line.half_smoothing_spread,
            point_count=len(points),
            elements=list(self.display_shapes),
            corners=[[float(p[0]), float(p[1])] for p in self.debug_corners],
        )
