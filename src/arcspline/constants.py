"""
Numerical constants shared by the ArcSpline fitting pipeline.

Tuned for mouse drawing on screen, where one unit is one pixel. Strokes
spanning hundreds of units with local curvature radii of tens of units
fit best; scale input to its on-screen size for consistent results.
"""

EPSILON = 1e-6
EPSILON2 = EPSILON * EPSILON

# Used instead of float max so divisions by small numbers stay finite
A_LOT = 1e10

# Minimum display gap: shorter spans and shapes are not materialized
MAX_SPLINE_GAP = 1.0

MAX_D_PARAM = 10000.0
MAX_ARC_RADIUS = 10000.0

# Numerical stability limit when fitting a circle
MAX_ARC_RADIUS_TO_CHORD_LENGTH_RATIO = 1000.0
