"""
Time Scale - Invertible linear mapping between a date domain and a pixel range.

This module provides the TimeScale class. Instants are epoch milliseconds (or
datetimes, which are converted). Dates outside the domain are extrapolated
linearly so a transform can represent over-pan before it is constrained.
"""

import math

from ..utils.civil_time import ensure_finite, to_datetime, to_ms
from ..utils.error_handler import DegenerateViewport, InvalidDomain, OutOfRangeInput
from .time_axis import tick_values


class TimeScale:
    """
    Linear time scale with an exact inverse.

    Args:
        domain (tuple): (start, end) instants, datetimes or epoch milliseconds
        range_ (tuple): (start, end) pixel positions

    Raises:
        InvalidDomain: If the domain is not increasing or not finite
        DegenerateViewport: If the pixel range has zero width
    """

    def __init__(self, domain, range_=(0.0, 1.0)):
        if hasattr(domain, 'min') and hasattr(domain, 'max'):
            domain = (domain.min, domain.max)
        try:
            d0, d1 = to_ms(domain[0]), to_ms(domain[1])
        except OutOfRangeInput as e:
            raise InvalidDomain(f"Scale domain must be finite: {e.message}")
        if d0 >= d1:
            raise InvalidDomain(f"Scale domain must be increasing, got {d0} >= {d1}")

        r0, r1 = float(range_[0]), float(range_[1])
        if not (math.isfinite(r0) and math.isfinite(r1)) or r0 == r1:
            raise DegenerateViewport(r1 - r0)

        self._domain = (d0, d1)
        self._range = (r0, r1)
        self._pixels_per_ms = (r1 - r0) / (d1 - d0)
        self._ms_per_pixel = (d1 - d0) / (r1 - r0)

    @property
    def domain(self):
        """Domain as (start_ms, end_ms)."""
        return self._domain

    @property
    def range(self):
        """Pixel range as (start, end)."""
        return self._range

    @property
    def pixels_per_ms(self) -> float:
        return self._pixels_per_ms

    def __call__(self, date) -> float:
        """
        Map an instant to a pixel position.

        Raises:
            OutOfRangeInput: If the instant is NaN or infinite
        """
        return self._range[0] + (to_ms(date) - self._domain[0]) * self._pixels_per_ms

    def invert(self, x: float) -> float:
        """
        Map a pixel position back to an instant in epoch milliseconds.

        Raises:
            OutOfRangeInput: If x is NaN or infinite
        """
        return self._domain[0] + (ensure_finite(x) - self._range[0]) * self._ms_per_pixel

    def invert_datetime(self, x: float):
        """
        Map a pixel position back to a UTC datetime.

        Raises:
            OutOfRangeInput: If the instant falls outside years 1..9999
        """
        return to_datetime(self.invert(x))

    def distance(self, span_ms: float) -> float:
        """Pixel length of a duration given in milliseconds."""
        return abs(span_ms * self._pixels_per_ms)

    def ticks(self, count: int = 10):
        """
        Get calendar-aligned tick instants across the domain.

        Args:
            count (int): Approximate number of ticks wanted

        Returns:
            list: Tick instants in epoch milliseconds, ascending
        """
        return tick_values(self._domain[0], self._domain[1], count)

    def copy(self) -> 'TimeScale':
        return TimeScale(self._domain, self._range)

    def __repr__(self):
        return f"TimeScale(domain={self._domain}, range={self._range})"


def make_scale(domain, range_) -> TimeScale:
    """Create a TimeScale mapping domain onto range_."""
    return TimeScale(domain, range_)
