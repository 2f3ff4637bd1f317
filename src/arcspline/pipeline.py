"""
Main pipeline orchestrator for ArcSpline.

Loads strokes from a stroke file, fits an ArcSpline to each, and writes the
results as a JSON document and an SVG drawing.
"""

import os

from arcspline.config import load_config
from arcspline.export.svg_emit import emit_splines_svg
from arcspline.io.line_store import load_lines
from arcspline.io.save_artifacts import ensure_dir, save_json, save_svg
from arcspline.models import SplineDocument, generate_doc_id
from arcspline.spline import ArcSpline
from arcspline.strokes.polyline import ParametrizedPolyline
from arcspline.tracer import get_tracer, trace


def fit_points(points, processing_input=None, half_smoothing_spread=None):
    """
    Fit an ArcSpline to a plain sequence of [x, y] points.

    Args:
        points: sequence of 2D points in stroke order
        processing_input: ProcessingInput (optional, defaults used otherwise)
        half_smoothing_spread: tangent smoothing distance (optional)

    Returns:
        ArcSpline
    """
    if half_smoothing_spread is None:
        line = ParametrizedPolyline.from_points(points)
    else:
        line = ParametrizedPolyline.from_points(points, half_smoothing_spread)
    return ArcSpline(line, processing_input)


@trace(label="run_pipeline", arg_names=["lines_path", "out_dir"])
def run_pipeline(lines_path, out_dir, config=None, config_path=None, show_source=False):
    """
    Run the fitting pipeline on a stroke file.

    Args:
        lines_path: stroke file written by save_lines
        out_dir: output directory
        config: PipelineConfig object (optional)
        config_path: path to YAML config file (optional)
        show_source: draw the source strokes underneath the splines

    Returns:
        SplineDocument with one record per stroke
    """
    tracer = get_tracer()

    # Load configuration
    if config is None:
        config = load_config(config_path)

    lines = load_lines(lines_path)

    ensure_dir(out_dir)

    document = SplineDocument(
        doc_id=generate_doc_id([os.path.abspath(lines_path)]),
        source_path=lines_path,
    )

    # One processing input is shared by every spline of the run
    processing_input = config.processing.copy().validate()

    splines = []
    with tracer.span("fit_splines", module="pipeline", count=len(lines)):
        for idx, line in enumerate(lines):
            if line.length() <= 0.0:
                tracer.event(f"Skipping line {idx} with zero length", level="WARN")
                continue
            spline = ArcSpline(line, processing_input)
            splines.append(spline)
            document.splines.append(spline.to_record())

    with tracer.span("export", module="pipeline"):
        save_json(document, os.path.join(out_dir, "splines.json"))

        source_points = [s.source_line.points() for s in splines] if show_source else None
        dwg = emit_splines_svg(document.splines, config.stroke, source_points=source_points)
        save_svg(dwg, os.path.join(out_dir, "final.svg"))

    total_elements = sum(len(r.elements) for r in document.splines)
    tracer.event(f"Pipeline completed: {len(document.splines)} splines, {total_elements} elements")

    return document
