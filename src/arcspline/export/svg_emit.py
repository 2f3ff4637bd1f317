"""
SVG emission for ArcSpline.

Writes fitted splines as vector paths: arcs become SVG elliptical-arc
commands, segments become straight path commands, and detected corners
are drawn as small markers.
"""

import svgwrite

from arcspline.models import compute_bbox
from arcspline.tracer import get_tracer, trace


def _fmt(value):
    return f"{float(value):.3f}"


def arc_to_svg_path(arc):
    """
    Convert an arc element to an SVG path string.

    The arc is drawn as two halves so a sweep near 360 degrees, whose end
    points coincide, still renders.
    """
    p0, p1 = arc.end_points()
    mid = arc.point_at_angle(arc.start_angle + 0.5 * arc.sweep_angle)
    r = _fmt(arc.radius)
    sweep_flag = 1 if arc.sweep_angle > 0.0 else 0

    parts = [f"M {_fmt(p0[0])} {_fmt(p0[1])}"]
    for p in (mid, p1):
        parts.append(f"A {r} {r} 0 0 {sweep_flag} {_fmt(p[0])} {_fmt(p[1])}")
    return " ".join(parts)


def segment_to_svg_path(segment):
    """Convert a segment element to an SVG path string."""
    p0, p1 = segment.end_points()
    return f"M {_fmt(p0[0])} {_fmt(p0[1])} L {_fmt(p1[0])} {_fmt(p1[1])}"


def element_to_svg_path(element):
    if element.kind == "arc":
        return arc_to_svg_path(element)
    return segment_to_svg_path(element)


def polyline_to_svg_path(points):
    """Convert a list of [x, y] points to an SVG path string."""
    if len(points) == 0:
        return ""
    parts = [f"M {_fmt(points[0][0])} {_fmt(points[0][1])}"]
    for p in points[1:]:
        parts.append(f"L {_fmt(p[0])} {_fmt(p[1])}")
    return " ".join(parts)


def _records_bbox(records, source_points):
    points = []
    for record in records:
        for element in record.elements:
            points.extend(element.end_points())
        points.extend(record.corners)
    for line_points in source_points or []:
        points.extend(line_points)
    return compute_bbox(points)


@trace(label="emit_splines_svg")
def emit_splines_svg(records, stroke_config, source_points=None, margin=10.0):
    """
    Create an SVG document containing all fitted splines.

    Args:
        records: list of SplineRecord objects
        stroke_config: StrokeConfig for widths and colors
        source_points: optional list of (N, 2) point arrays, drawn faintly
            underneath the splines
        margin: padding around the drawing bounds

    Returns:
        svgwrite.Drawing object
    """
    tracer = get_tracer()

    min_x, min_y, max_x, max_y = _records_bbox(records, source_points)
    width = max(max_x - min_x, 1.0) + 2.0 * margin
    height = max(max_y - min_y, 1.0) + 2.0 * margin

    dwg = svgwrite.Drawing(size=(f"{width:.0f}px", f"{height:.0f}px"))
    dwg.viewbox(min_x - margin, min_y - margin, width, height)

    dwg.defs.add(dwg.style("""
        .stroke { stroke-linecap: round; stroke-linejoin: round; }
    """))

    if source_points:
        source_group = dwg.g(id="source", fill="none", stroke=stroke_config.source_color,
                             stroke_width=stroke_config.width * 0.5)
        for line_points in source_points:
            if len(line_points) >= 2:
                source_group.add(dwg.path(d=polyline_to_svg_path(line_points)))
        dwg.add(source_group)

    spline_group = dwg.g(id="splines", fill="none", stroke=stroke_config.color,
                         stroke_width=stroke_config.width, class_="stroke")
    corner_group = dwg.g(id="corners", fill=stroke_config.color, stroke="none")

    element_count = 0
    for record in records:
        spline = dwg.g(id=record.spline_id)
        for element in record.elements:
            spline.add(dwg.path(d=element_to_svg_path(element), class_=element.kind))
            element_count += 1
        spline_group.add(spline)

        for corner in record.corners:
            corner_group.add(dwg.circle(center=(corner[0], corner[1]), r=stroke_config.corner_radius))

    dwg.add(spline_group)
    dwg.add(corner_group)

    tracer.event(f"SVG emitted with {len(records)} splines and {element_count} elements")

    return dwg
