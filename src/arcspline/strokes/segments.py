"""
Straight segment classification and shape error measurement.
"""

from arcspline.constants import EPSILON2
from arcspline.geometry.shapes import Line
from arcspline.geometry.vector import dist
from arcspline.strokes.polyline import sample_ts


def calc_mean_squared_error(line, t_start, t_step, t_end, fitting_shape):
    """
    Mean squared signed distance from line samples to a fitting shape.

    Samples are taken at t_start, t_start + t_step, ... strictly below t_end.
    Returns 0.0 when there are no samples.
    """
    ts = sample_ts(t_start, t_step, t_end)
    if len(ts) == 0:
        return 0.0
    distances = fitting_shape.signed_dist_to(line.points_at(ts))
    return float((distances * distances).mean())


def is_segment(line, segment_bounds, segments_config):
    """
    Check if the chord between two line parameters approximates the line there.

    The allowed mean squared error grows linearly with the chord length,
    relative to the reference segment length.

    Returns:
        (accepted, mean_error2) tuple
    """
    assert segment_bounds.start >= 0.0 and segment_bounds.end <= line.length()
    p0 = line.point_at(segment_bounds.start)
    p1 = line.point_at(segment_bounds.end)
    chord_length = dist(p0, p1)
    if chord_length * chord_length <= EPSILON2:
        # A closed loop has no chord to test against
        return False, float("inf")

    test_fit_line = Line.between(p0, p1)
    mean_error2 = calc_mean_squared_error(
        line, segment_bounds.start, segments_config.t_step, segment_bounds.end, test_fit_line
    )
    max_error = segments_config.max_mean_error_at_reference_length
    limit_multiplier = chord_length / segments_config.reference_segment_length
    return mean_error2 <= max_error * max_error * limit_multiplier, mean_error2
