"""Pytest fixtures for ArcSpline tests."""

import math
import tempfile

import numpy as np
import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture(autouse=True)
def reset_tracer():
    """Leave the global tracer disabled after every test."""
    yield
    from arcspline.tracer import configure_tracer
    configure_tracer(enabled=False)


@pytest.fixture
def straight_points():
    """A straight horizontal stroke of length 100, one unit per sample."""
    return [[float(x), 0.0] for x in range(101)]


@pytest.fixture
def l_shape_points():
    """Straight 50-unit run, 90 degree turn, straight 50-unit run."""
    points = [[float(x), 0.0] for x in range(51)]
    points += [[50.0, float(y)] for y in range(1, 51)]
    return points


@pytest.fixture
def arc_points():
    """A circular arc of radius 40 around the origin spanning 120 degrees."""
    radius = 40.0
    sweep = math.radians(120.0)
    count = int(math.ceil(radius * sweep))
    angles = np.linspace(0.0, sweep, count + 1)
    return [[radius * math.cos(a), radius * math.sin(a)] for a in angles]


@pytest.fixture
def wave_points():
    """A smooth sine wave stroke with slight deterministic noise."""
    rng = np.random.default_rng(7)
    xs = np.arange(0.0, 200.0, 1.0)
    ys = 25.0 * np.sin(xs / 25.0) + rng.normal(0.0, 0.3, len(xs))
    return np.column_stack([xs, ys]).tolist()


@pytest.fixture
def straight_line(straight_points):
    from arcspline.strokes.polyline import ParametrizedPolyline
    return ParametrizedPolyline.from_points(straight_points)


@pytest.fixture
def l_shape_line(l_shape_points):
    from arcspline.strokes.polyline import ParametrizedPolyline
    return ParametrizedPolyline.from_points(l_shape_points)


@pytest.fixture
def arc_line(arc_points):
    """Arc stroke with a smoothing spread suited to its curvature."""
    from arcspline.strokes.polyline import ParametrizedPolyline
    return ParametrizedPolyline.from_points(arc_points, half_smoothing_spread=2.0)


@pytest.fixture
def default_config():
    """Create default pipeline configuration."""
    from arcspline.config import PipelineConfig
    return PipelineConfig()


@pytest.fixture
def default_processing_input():
    from arcspline.config import ProcessingInput
    return ProcessingInput()
