"""
Scalar ranges over the stroke parametrization.

A Range marks a sub-extent of a polyline's t-parameter: a corner (zero
length), a segment, or the clip bounds used for tangent estimation.
"""

import math
from dataclasses import dataclass


@dataclass(order=True)
class Range:
    """
    A float interval [start, end].

    Ordering compares (start, end), which is the sort order used when
    merging corners and segments. A range with start > end is invalid;
    use Range.invalid() to create one.
    """
    start: float
    end: float

    def __post_init__(self):
        assert self.is_valid(), f"invalid range [{self.start}, {self.end}]"

    @classmethod
    def invalid(cls):
        """Create an invalid (empty) range, ready for include()."""
        result = cls(0.0, 0.0)
        result.invalidate()
        return result

    def length(self):
        """Length of the range; 0.0 if invalid."""
        return self.end - self.start if self.is_valid() else 0.0

    def is_valid(self):
        return self.start <= self.end

    def invalidate(self):
        self.start = math.inf
        self.end = -math.inf

    def include(self, value):
        """Expand the range to cover value."""
        self.start = min(value, self.start)
        self.end = max(self.end, value)

    def inflate(self, padding):
        """Pad both sides. Shrinking is not checked."""
        assert padding >= 0.0
        self.start -= padding
        self.end += padding

    def copy(self):
        return Range(self.start, self.end) if self.is_valid() else Range.invalid()
