"""
Output files of a fitting run: the JSON spline document and the SVG drawing.
"""

import json
import os

from arcspline.tracer import get_tracer


def ensure_dir(path):
    """Create directory if it does not exist. An empty path is the working directory."""
    if path:
        os.makedirs(path, exist_ok=True)


def save_json(data, path, indent=2):
    """
    Write a pydantic model or plain JSON data to path.

    Models are serialized by pydantic so element kinds and timestamps
    survive a load with load_json_model().
    """
    ensure_dir(os.path.dirname(path))

    if hasattr(data, "model_dump_json"):
        content = data.model_dump_json(indent=indent)
    else:
        content = json.dumps(data, indent=indent, default=str)

    with open(path, "w", encoding="utf-8") as f:
        f.write(content)

    get_tracer().event(f"Saved JSON: {path}")


def load_json_model(path, model_cls):
    """Read a JSON file written by save_json() back into model_cls."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"JSON file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        return model_cls.model_validate_json(f.read())


def save_svg(drawing, path):
    """Write an svgwrite Drawing, or an SVG string, to path."""
    ensure_dir(os.path.dirname(path))

    content = drawing.tostring() if hasattr(drawing, "tostring") else str(drawing)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)

    get_tracer().event(f"Saved SVG: {path}")
