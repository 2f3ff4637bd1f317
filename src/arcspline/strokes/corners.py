"""
Corner detection for freeform strokes.

A corner is a place where the tangent changes sharply while staying
relatively constant farther away on each arm. Tangents are sampled at four
offsets around each tested point; the middle angle must be large and both
outer angles small.
"""

import math

import numpy as np

from arcspline.constants import EPSILON2
from arcspline.geometry.ranges import Range
from arcspline.geometry.vector import angles_between, norm2
from arcspline.tracer import get_tracer, trace


def measurement_offsets(line, corners_config):
    """
    Four tangent offsets around a tested point, symmetric around zero.
    """
    inner = corners_config.inner_inter_measurement_factor
    outer = corners_config.outer_inter_measurement_factor
    h = line.half_smoothing_spread
    return np.array([-(outer + inner), -inner, inner, inner + outer]) * h


def _scan_ts(bounds, corners_config):
    margin = math.ceil(corners_config.outer_inter_measurement_factor
                       + 0.5 * corners_config.inner_inter_measurement_factor)
    first = bounds.start + margin
    last = bounds.end - margin
    if last < first:
        return np.empty(0, dtype=np.float64)
    count = int(math.floor((last - first) / corners_config.t_step)) + 1
    return first + corners_config.t_step * np.arange(count, dtype=np.float64)


def corner_test_positives(line, corners_config, ts):
    """
    Evaluate the corner test at each t.

    Returns:
        boolean array, True where t qualifies as a corner candidate
    """
    d = measurement_offsets(line, corners_config)
    tangents = [line.tangents_at(ts + di) for di in d]

    angle01 = angles_between(tangents[0], tangents[1])
    angle12 = angles_between(tangents[1], tangents[2])
    angle23 = angles_between(tangents[2], tangents[3])

    with np.errstate(divide="ignore", invalid="ignore"):
        return ((angle01 < corners_config.outer_max_angle_in_deg)
                & (angle12 > corners_config.inner_min_angle_in_deg)
                & (angle23 < corners_config.outer_max_angle_in_deg)
                & (angle01 / angle12 < 1.0 / 3.0)
                & (angle23 / angle12 < 1.0 / 3.0))


def _close_section(sections, section, corners_config):
    """Keep a finished run of positives if it is long enough, merging with a close predecessor."""
    if section.length() / corners_config.t_step < corners_config.min_number_test_positives_in_series:
        return
    if sections and sections[-1].end + corners_config.max_dist_between_corners_to_merge >= section.start:
        sections[-1].end = section.end
    else:
        sections.append(section.copy())


def find_corner_sections(line, corners_config):
    """
    Scan the line within its bounds for runs of corner test positives.

    Returns:
        list of Range, one per (merged) run
    """
    ts = _scan_ts(line.get_bounds(), corners_config)
    if len(ts) == 0:
        return []

    positives = corner_test_positives(line, corners_config, ts)

    sections = []
    section = Range.invalid()
    for t, positive in zip(ts, positives):
        if positive:
            section.include(float(t))
        elif section.is_valid():
            _close_section(sections, section, corners_config)
            section.invalidate()

    if section.is_valid():
        _close_section(sections, section, corners_config)

    return sections


def best_corner_t(line, corners_config, section):
    """
    Reduce a corner section to the single t that best represents it.

    The winner is the point furthest along the difference of the tangents
    bracketing the section, i.e. the tip of the corner.
    """
    d = measurement_offsets(line, corners_config)
    tangent0 = line.tangent_at(section.start + d[1])
    tangent1 = line.tangent_at(section.end + d[2])
    search_dir = tangent0 - tangent1
    t_best = 0.5 * (section.start + section.end)

    if norm2(search_dir) > EPSILON2:
        search = section.copy()
        # Let the corner drift past the run, for chains of short segments near h in length
        search.inflate(2.0 * corners_config.inner_inter_measurement_factor * line.half_smoothing_spread)
        ts = search.start + np.arange(int(math.floor(search.length())) + 1, dtype=np.float64)
        positions = line.points_at(ts) @ search_dir
        t_best = float(ts[int(np.argmax(positions))])

    bounds = line.get_bounds()
    return min(max(t_best, bounds.start), bounds.end)


@trace(label="find_corners", arg_names=["line"])
def find_corners(line, corners_config):
    """
    Find corners of a line within its bounds.

    Args:
        line: ParametrizedPolyline, bounds set to the section to scan
        corners_config: CornersConfig

    Returns:
        ordered list of zero-length Range objects, one per corner
    """
    tracer = get_tracer()

    sections = find_corner_sections(line, corners_config)
    corners = []
    for section in sections:
        t = best_corner_t(line, corners_config, section)
        if corners and corners[-1].start == t:
            continue
        corners.append(Range(t, t))

    tracer.event(f"Found {len(corners)} corners", sections=len(sections))

    return corners
