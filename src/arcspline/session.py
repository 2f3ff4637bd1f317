"""
Drawing session for interactive stroke capture.

Holds the state an interactive front end works with: the stroke being
drawn, the fitted splines in creation order, and the current selection.
Fitting code receives everything it needs from the session explicitly.
"""

import math

from arcspline.config import ProcessingInput
from arcspline.io.line_store import load_lines, save_lines
from arcspline.spline import ArcSpline
from arcspline.strokes.polyline import DEFAULT_HALF_SMOOTHING_SPREAD, ParametrizedPolyline
from arcspline.tracer import get_tracer

# Value multipliers at full slider deflection when tuning a selected spline
SPLINE_ERROR_RANGE = 4.0
SEGMENT_ERROR_RANGE = 1.0 / 3.0
EXTRA_SINGLE_ARC_TOLERANCE_THRESHOLD = 0.98


class DrawingSession:
    """
    Strokes, fitted splines and selection of one drawing.

    All splines share the session's processing input until one of them is
    tuned individually with tweak_selected().
    """

    def __init__(self, processing_input=None, half_smoothing_spread=DEFAULT_HALF_SMOOTHING_SPREAD):
        self.processing_input = processing_input if processing_input is not None else ProcessingInput()
        self.half_smoothing_spread = half_smoothing_spread
        self.splines = []
        self.active_line = None
        self.selected = None

    @classmethod
    def from_config(cls, config):
        """Create a session using a PipelineConfig's processing and polyline sections."""
        return cls(config.processing.copy().validate(), config.polyline.half_smoothing_spread)

    @property
    def is_drawing(self):
        return self.active_line is not None

    def begin_stroke(self, point):
        """Start a new stroke at point. Clears the selection."""
        self.active_line = ParametrizedPolyline(self.half_smoothing_spread)
        self.active_line.add_point(point)
        self.selected = None

    def extend_stroke(self, point):
        """Append a point to the active stroke."""
        assert self.active_line is not None, "no stroke in progress"
        self.active_line.add_point(point)

    def end_stroke(self):
        """
        Finish the active stroke.

        Returns:
            the new ArcSpline, or None when the stroke has no length
        """
        line = self.active_line
        self.active_line = None
        if line is None or line.length() <= 0.0:
            return None

        spline = ArcSpline(line, self.processing_input)
        self.splines.append(spline)
        get_tracer().event(f"Stroke fitted with {len(spline.display_shapes)} elements", line=line)
        return spline

    def find_latest_element_in_distance(self, point, max_dist=5.0, test_dist_for_endpoints=5.0):
        """
        Find the latest spline with an element within max_dist of point.

        Splines and their elements are searched newest first, which is the
        order a user expects when clicking overlapping strokes.

        Returns:
            (spline, is_endpoint_hit) tuple; (None, False) when nothing is hit
        """
        for spline in reversed(self.splines):
            for element in reversed(spline.display_shapes):
                if element.dist_to(point) <= max_dist:
                    return spline, element.dist_to_end_point(point) <= test_dist_for_endpoints
        return None, False

    def select(self, point, max_dist=5.0, test_dist_for_endpoints=5.0):
        """
        Select the latest spline near point.

        Returns:
            (spline, is_endpoint_hit) tuple, as find_latest_element_in_distance
        """
        spline, is_endpoint_hit = self.find_latest_element_in_distance(point, max_dist, test_dist_for_endpoints)
        self.selected = spline
        return spline, is_endpoint_hit

    def tweak_selected(self, spline_error_axis, segment_error_axis):
        """
        Tune the error limits of the selected spline and refit it.

        Both axes are slider positions clipped to [-1, 1]; 0 restores the
        default limits. The selected spline gets its own processing input
        the first time it is tuned.
        """
        assert self.selected is not None, "no spline selected"
        x = min(max(spline_error_axis, -1.0), 1.0)
        y = min(max(segment_error_axis, -1.0), 1.0)

        processing_input = self.selected.processing_input
        if processing_input is self.processing_input:
            processing_input = processing_input.copy()

        reference = ProcessingInput()
        processing_input.biarcs.max_mean_error = reference.biarcs.max_mean_error * math.pow(SPLINE_ERROR_RANGE, x)
        processing_input.segments.max_mean_error_at_reference_length = (
            reference.segments.max_mean_error_at_reference_length * math.pow(SEGMENT_ERROR_RANGE, y)
        )
        processing_input.biarcs.allow_extra_tolerance_for_single_arc_sections = (
            EXTRA_SINGLE_ARC_TOLERANCE_THRESHOLD < x
        )

        self.selected.recreate_spline(processing_input)

    def refit_all(self, processing_input=None):
        """Refit every spline with the session's (optionally replaced) processing input."""
        if processing_input is not None:
            self.processing_input = processing_input
        for spline in self.splines:
            spline.recreate_spline(self.processing_input)

    def clear(self):
        """Drop all strokes, splines and the selection."""
        self.active_line = None
        self.selected = None
        self.splines = []

    def save(self, path):
        """Save the source lines. Fitted splines are not stored."""
        save_lines([spline.source_line for spline in self.splines], path)

    def load(self, path):
        """
        Replace the session's content with the lines of a stroke file.

        Splines are refit with the session's processing input.
        """
        lines = load_lines(path)
        self.clear()
        for line in lines:
            self.splines.append(ArcSpline(line, self.processing_input))
        return len(self.splines)
