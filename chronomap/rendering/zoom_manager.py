"""
Zoom Manager - Controls the zoom extent and wheel zoom math for the timeline.

This module provides the ZoomManager class which manages:
- The scale extent (scale_k is clamped to [1, 1_000_000] by default)
- Wheel zoom factors and zooming about the pointer position
- The time unit and label shown for the current visible span
"""

import math

from .time_axis import choose_interval


class ZoomManager:
    """
    Owns the clamp policy for the transform scale.

    The constrain step assumes scale_k is already inside the scale extent,
    so every transform produced from user input passes through clamp()
    before it is constrained to the domain.
    """

    # Scale extent
    MIN_SCALE = 1.0
    MAX_SCALE = 1_000_000.0

    # Wheel delta to zoom exponent (a delta of -500 doubles the scale)
    WHEEL_DELTA_FACTOR = 0.002

    # Factor used by zoom_in()/zoom_out() button intents
    STEP_FACTOR = 2.0

    UNIT_LABELS = {
        'second': 'Second',
        'minute': 'Minute',
        'hour': 'Hour',
        'day': 'Day',
        'week': 'Week',
        'month': 'Month',
        'year': 'Year',
    }

    def __init__(self, min_scale=MIN_SCALE, max_scale=MAX_SCALE,
                 wheel_delta_factor=WHEEL_DELTA_FACTOR):
        """
        Initialize the ZoomManager.

        Args:
            min_scale (float): Smallest allowed scale_k (fully zoomed out)
            max_scale (float): Largest allowed scale_k (fully zoomed in)
            wheel_delta_factor (float): Multiplier turning wheel deltas into zoom exponents

        Raises:
            ValueError: If the extent is empty or not positive
        """
        if not (0 < min_scale <= max_scale) or not math.isfinite(max_scale):
            raise ValueError(
                f"Scale extent must satisfy 0 < min <= max, got [{min_scale}, {max_scale}]"
            )

        self.min_scale = float(min_scale)
        self.max_scale = float(max_scale)
        self.wheel_delta_factor = float(wheel_delta_factor)

    @property
    def scale_extent(self):
        """
        Get the allowed scale range.

        Returns:
            tuple: (min_scale, max_scale)
        """
        return (self.min_scale, self.max_scale)

    def clamp_scale(self, scale_k):
        """Clamp a scale value to the scale extent."""
        return min(self.max_scale, max(self.min_scale, scale_k))

    def clamp(self, transform):
        """
        Clamp a transform's scale to the scale extent.

        The translation is left untouched; callers that need a fixed anchor
        should use zoom_about() instead.

        Returns:
            Transform: The clamped transform (the input itself if unchanged)
        """
        scale_k = self.clamp_scale(transform.scale_k)
        if scale_k == transform.scale_k:
            return transform
        return transform.with_scale(scale_k)

    def wheel_factor(self, delta_y):
        """
        Get the zoom factor for a wheel delta.

        Negative deltas (wheel up) zoom in, positive deltas zoom out.

        Args:
            delta_y (float): Vertical wheel delta in pixels

        Returns:
            float: Multiplier for scale_k
        """
        return 2 ** (-delta_y * self.wheel_delta_factor)

    def zoom_about(self, transform, factor, pointer_x):
        """
        Zoom a transform by factor while keeping pointer_x anchored.

        The factor is reduced as needed so the result stays inside the
        scale extent, which keeps the instant under the pointer in place.

        Args:
            transform (Transform): Current transform
            factor (float): Requested zoom multiplier
            pointer_x (float): Screen pixel to anchor

        Returns:
            Transform: Zoomed transform
        """
        target = self.clamp_scale(transform.scale_k * factor)
        if target == transform.scale_k:
            return transform
        return transform.scale_about(target / transform.scale_k, pointer_x)

    def zoom_in(self, transform, pointer_x):
        """Zoom in one step about pointer_x."""
        return self.zoom_about(transform, self.STEP_FACTOR, pointer_x)

    def zoom_out(self, transform, pointer_x):
        """Zoom out one step about pointer_x."""
        return self.zoom_about(transform, 1.0 / self.STEP_FACTOR, pointer_x)

    def can_zoom_in(self, transform):
        return transform.scale_k < self.max_scale

    def can_zoom_out(self, transform):
        return transform.scale_k > self.min_scale

    def get_time_unit(self, visible_span_ms, tick_count=10):
        """
        Get the axis time unit for a visible span.

        Returns:
            tuple: (unit, step) such as ('hour', 6)
        """
        return choose_interval(visible_span_ms, tick_count)

    def get_zoom_label(self, visible_span_ms, tick_count=10):
        """
        Get a human-readable label for the axis granularity.

        Returns:
            str: Label such as 'Day', '6 Hours' or '50 Years'
        """
        unit, step = self.get_time_unit(visible_span_ms, tick_count)
        label = self.UNIT_LABELS[unit]
        if step == 1:
            return label
        return f"{step} {label}s"

    def get_zoom_info(self, transform, visible_span_ms):
        """
        Get complete information about the current zoom.

        Returns:
            dict: Keys 'scale_k', 'unit', 'step', 'label', 'can_zoom_in', 'can_zoom_out'
        """
        unit, step = self.get_time_unit(visible_span_ms)
        return {
            'scale_k': transform.scale_k,
            'unit': unit,
            'step': step,
            'label': self.get_zoom_label(visible_span_ms),
            'can_zoom_in': self.can_zoom_in(transform),
            'can_zoom_out': self.can_zoom_out(transform),
        }

    def __repr__(self):
        return f"ZoomManager(extent=[{self.min_scale:g}, {self.max_scale:g}])"
