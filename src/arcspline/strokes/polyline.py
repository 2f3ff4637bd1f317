"""
Parametrized polylines for freeform strokes.

Points are indexed by 't', the distance traveled along the stroke from its
first point. Point queries interpolate between the two bracketing samples.

Tangents measured from pointer input are very noisy since consecutive
samples are often a pixel or two apart. tangent_at() returns a smoothed
tangent from the secant between points half_smoothing_spread away on
either side. set_bounds() clips those secant endpoints to a sub-range,
which freezes the measured tangent near the sub-range ends instead of
letting it reach across a corner.
"""

import bisect
import math

import numpy as np

from arcspline.constants import A_LOT, EPSILON
from arcspline.geometry.ranges import Range
from arcspline.geometry.vector import as_vec, dist


DEFAULT_HALF_SMOOTHING_SPREAD = 10.0

DEGENERATE_TANGENT = np.array([1.0, 0.0])


class ParametrizedPolyline:
    """
    An ordered map from cumulative length t to a 2D input point.

    The first and last keys are sentinels at -A_LOT and +A_LOT holding the
    first and last real points, so queries past either end return the end
    point without bounds checks. Real data occupies [0, length()].
    """

    def __init__(self, half_smoothing_spread=DEFAULT_HALF_SMOOTHING_SPREAD):
        # Distance between the query point and each secant endpoint used for tangents
        self.half_smoothing_spread = half_smoothing_spread
        self._ts = []
        self._xs = []
        self._ys = []
        self._cached_length = 0.0
        self._arrays = None

        # Temporary processing state, never serialized
        self.clip_range = Range(-A_LOT, A_LOT)
        self.clip_margin = 0.0

    def __len__(self):
        """Number of real samples (sentinels excluded)."""
        return max(0, len(self._ts) - 2)

    def __repr__(self):
        return (f"ParametrizedPolyline(samples={len(self)}, length={self._cached_length:.2f}, "
                f"h={self.half_smoothing_spread})")

    def add_point(self, point):
        """Append a point, growing the line by its distance to the last point."""
        point = as_vec(point)
        x, y = float(point[0]), float(point[1])
        self._arrays = None

        if not self._ts:
            self._ts = [-A_LOT, 0.0, A_LOT]
            self._xs = [x, x, x]
            self._ys = [y, y, y]
            return

        last_t = self._ts[-2]
        t = last_t + dist((self._xs[-2], self._ys[-2]), (x, y))
        if t == last_t:
            # Same key: replace the sample, as a map assignment would
            self._xs[-2] = x
            self._ys[-2] = y
        else:
            self._ts.insert(-1, t)
            self._xs.insert(-1, x)
            self._ys.insert(-1, y)
        self._xs[-1] = x
        self._ys[-1] = y
        self._cached_length = t

    def length(self):
        """Total length of the line."""
        return self._cached_length

    def samples(self):
        """
        Real samples as (t, x, y) tuples in order, sentinels excluded.
        """
        return list(zip(self._ts[1:-1], self._xs[1:-1], self._ys[1:-1]))

    def points(self):
        """Real sample points as an (N, 2) array."""
        return np.column_stack([self._xs[1:-1], self._ys[1:-1]]).astype(np.float64)

    @classmethod
    def from_points(cls, points, half_smoothing_spread=DEFAULT_HALF_SMOOTHING_SPREAD):
        """Build a line by appending each point in order."""
        line = cls(half_smoothing_spread)
        for point in points:
            line.add_point(point)
        return line

    @classmethod
    def from_samples(cls, samples, half_smoothing_spread=DEFAULT_HALF_SMOOTHING_SPREAD):
        """
        Rebuild a line from stored (t, x, y) samples.

        Samples are keyed by their stored t, so a line survives a
        save/load round trip exactly. Sentinels are recreated.
        """
        line = cls(half_smoothing_spread)
        by_t = {}
        for t, x, y in samples:
            by_t[float(t)] = (float(x), float(y))
        if not by_t:
            return line

        keys = sorted(by_t)
        first = by_t[keys[0]]
        last = by_t[keys[-1]]
        line._ts = [-A_LOT] + keys + [A_LOT]
        line._xs = [first[0]] + [by_t[k][0] for k in keys] + [last[0]]
        line._ys = [first[1]] + [by_t[k][1] for k in keys] + [last[1]]
        line._cached_length = keys[-1]
        return line

    def copy(self):
        """Independent copy; the fitting pipeline mutates bounds on a copy only."""
        result = ParametrizedPolyline(self.half_smoothing_spread)
        result._ts = list(self._ts)
        result._xs = list(self._xs)
        result._ys = list(self._ys)
        result._cached_length = self._cached_length
        result.clip_range = self.clip_range.copy()
        result.clip_margin = self.clip_margin
        return result

    def _get_arrays(self):
        if self._arrays is None:
            self._arrays = (
                np.asarray(self._ts, dtype=np.float64),
                np.asarray(self._xs, dtype=np.float64),
                np.asarray(self._ys, dtype=np.float64),
            )
        return self._arrays

    def point_at(self, t):
        """Point on the line at distance t from its start."""
        assert self._ts, "point queried on an empty polyline"
        idx = min(max(bisect.bisect_right(self._ts, t), 1), len(self._ts) - 1)
        t_prev, t_next = self._ts[idx - 1], self._ts[idx]
        local_t = (t - t_prev) / (t_next - t_prev)
        x = self._xs[idx - 1] * (1.0 - local_t) + self._xs[idx] * local_t
        y = self._ys[idx - 1] * (1.0 - local_t) + self._ys[idx] * local_t
        return np.array([x, y], dtype=np.float64)

    def points_at(self, ts):
        """Vectorized point_at: returns an (N, 2) array for N parameters."""
        assert self._ts, "point queried on an empty polyline"
        keys, xs, ys = self._get_arrays()
        ts = np.asarray(ts, dtype=np.float64)
        return np.column_stack([np.interp(ts, keys, xs), np.interp(ts, keys, ys)])

    def _secant_bounds(self, t):
        h = self.half_smoothing_spread
        start, end = self.clip_range.start, self.clip_range.end
        ta = np.clip(t - h, start, end - self.clip_margin)
        tb = np.clip(t + h, start + self.clip_margin, end)
        return ta, tb

    def tangent_at(self, t):
        """
        Smoothed unit tangent at t.

        Secant endpoints are clipped to the bounds; within 2 * h of either
        bound the tangent stops changing.
        """
        assert EPSILON < self.half_smoothing_spread
        ta, tb = self._secant_bounds(t)
        diff = self.point_at(float(tb)) - self.point_at(float(ta))
        length = math.hypot(diff[0], diff[1])
        if length <= EPSILON:
            # Secant endpoints coincide (single point, or the stroke doubled back)
            return DEGENERATE_TANGENT.copy()
        return diff / length

    def tangents_at(self, ts):
        """Vectorized tangent_at: returns an (N, 2) array of unit tangents."""
        assert EPSILON < self.half_smoothing_spread
        ta, tb = self._secant_bounds(np.asarray(ts, dtype=np.float64))
        diff = self.points_at(tb) - self.points_at(ta)
        lengths = np.hypot(diff[:, 0], diff[:, 1])
        degenerate = lengths <= EPSILON
        result = diff / np.where(degenerate, 1.0, lengths)[:, None]
        result[degenerate] = DEGENERATE_TANGENT
        return result

    def get_bounds(self):
        return self.clip_range

    def set_bounds(self, bounds):
        """Restrict tangent computation to a sub-range of the line."""
        self.clip_range = bounds.copy()
        self.clip_margin = min(2.0 * self.half_smoothing_spread, bounds.length())


def sample_ts(t_start, t_step, t_end):
    """
    Parameters t_start, t_start + t_step, ... strictly below t_end.
    """
    assert t_step > 0.0
    count = int(math.ceil((t_end - t_start) / t_step))
    if count <= 0:
        return np.empty(0, dtype=np.float64)
    ts = t_start + t_step * np.arange(count, dtype=np.float64)
    return ts[ts < t_end]
