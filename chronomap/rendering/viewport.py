"""
Viewport - Current pan/zoom state of the timeline and the intents that change it.

The Viewport is the only writer of the current transform. Every intent builds
a candidate transform, clamps its scale to the zoom extent and constrains it
to the domain before it becomes current.
"""

import logging
import math

from ..utils.civil_time import to_ms
from ..utils.error_handler import OutOfRangeInput
from .fit_transform import (
    GO_TO_DATE_MONTHS,
    MIN_PADDING_MS,
    PADDING_RATIO,
    fit_transform,
    go_to_date_transform,
)
from .time_scale import TimeScale
from .transform import Transform
from .viewport_transform import check_pixel_width, constrain, rescale, visible_range
from .zoom_manager import ZoomManager

# Configure logger
logger = logging.getLogger(__name__)


def _finite(value, name):
    value = float(value)
    if not math.isfinite(value):
        raise OutOfRangeInput(f"{name} must be finite", value)
    return value


class Viewport:
    """
    Transform state for a timeline of a given pixel width.

    Args:
        domain (Domain): Date range the view may show
        pixel_width (float): Width of the timeline in pixels
        zoom_manager (ZoomManager): Scale extent and wheel policy
        padding_ratio (float): Fit padding as a fraction of the target span
        min_padding_ms (float): Minimum fit padding per side
        go_to_date_months (int): Half-width of the go-to-date window

    Raises:
        DegenerateViewport: If pixel_width is not positive
    """

    def __init__(self, domain, pixel_width, zoom_manager=None,
                 padding_ratio=PADDING_RATIO, min_padding_ms=MIN_PADDING_MS,
                 go_to_date_months=GO_TO_DATE_MONTHS):
        self.domain = domain
        self.zoom_manager = zoom_manager or ZoomManager()
        self.padding_ratio = padding_ratio
        self.min_padding_ms = min_padding_ms
        self.go_to_date_months = go_to_date_months

        self._pixel_width = check_pixel_width(pixel_width)
        self._base_scale = TimeScale(domain, (0.0, self._pixel_width))
        self._transform = self._settle(Transform.identity())

    @property
    def pixel_width(self):
        return self._pixel_width

    @property
    def base_scale(self) -> TimeScale:
        """Scale mapping the full domain onto [0, pixel_width]."""
        return self._base_scale

    @property
    def transform(self) -> Transform:
        return self._transform

    def effective_scale(self) -> TimeScale:
        """Base scale composed with the current transform."""
        return rescale(self._transform, self._base_scale)

    def visible_range(self):
        """
        Get the visible window.

        Returns:
            tuple: (start_ms, end_ms)
        """
        return visible_range(self._transform, self._base_scale, self._pixel_width)

    def _settle(self, transform):
        transform = self.zoom_manager.clamp(transform)
        return constrain(transform, self.domain, self._base_scale, self._pixel_width)

    def set_transform(self, transform):
        """
        Make a candidate transform current after clamping and constraining.

        Returns:
            Transform: The transform actually applied
        """
        self._transform = self._settle(transform)
        return self._transform

    def pan(self, delta_pixels):
        """
        Pan by a screen distance. Positive deltas move content to the right.

        Returns:
            Transform: New transform
        """
        delta = _finite(delta_pixels, "Pan delta")
        return self.set_transform(self._transform.translate(delta))

    def wheel_zoom(self, delta_y, pointer_x):
        """
        Zoom by a wheel delta about the pointer position.

        Returns:
            Transform: New transform
        """
        factor = self.zoom_manager.wheel_factor(_finite(delta_y, "Wheel delta"))
        zoomed = self.zoom_manager.zoom_about(
            self._transform, factor, _finite(pointer_x, "Pointer position")
        )
        return self.set_transform(zoomed)

    def zoom_in(self, pointer_x=None):
        """Zoom in one step about pointer_x (defaults to the center)."""
        x = self._pixel_width / 2.0 if pointer_x is None else _finite(pointer_x, "Pointer position")
        return self.set_transform(self.zoom_manager.zoom_in(self._transform, x))

    def zoom_out(self, pointer_x=None):
        """Zoom out one step about pointer_x (defaults to the center)."""
        x = self._pixel_width / 2.0 if pointer_x is None else _finite(pointer_x, "Pointer position")
        return self.set_transform(self.zoom_manager.zoom_out(self._transform, x))

    def go_to_date(self, date):
        """
        Frame a window of go_to_date_months months on each side of date.

        Raises:
            InvalidInstant: If date is not an instant
            OutOfRangeInput: If date is not finite
        """
        transform = go_to_date_transform(
            to_ms(date), self.domain, self._base_scale, self._pixel_width,
            months=self.go_to_date_months, scale_extent=self.zoom_manager.scale_extent,
        )
        self._transform = transform
        return transform

    def zoom_to_events(self, events):
        """
        Frame a set of events with padding.

        Raises:
            EmptyTargetSet: If events is empty
        """
        transform = fit_transform(
            events, self.domain, self._base_scale, self._pixel_width,
            padding_ratio=self.padding_ratio, min_padding_ms=self.min_padding_ms,
            scale_extent=self.zoom_manager.scale_extent,
        )
        self._transform = transform
        return transform

    def reset(self):
        """Return to the identity transform (full domain)."""
        return self.set_transform(Transform.identity())

    def resize(self, pixel_width):
        """
        Change the viewport width, keeping the visible window's start date.

        Raises:
            DegenerateViewport: If pixel_width is not positive
        """
        width = check_pixel_width(pixel_width)
        if width == self._pixel_width:
            return self._transform

        start_ms = self.visible_range()[0]
        scale_k = self._transform.scale_k
        self._pixel_width = width
        self._base_scale = TimeScale(self.domain, (0.0, width))
        translate_x = -self._base_scale(start_ms) * scale_k
        logger.debug(f"Viewport resized to {width}px")
        return self.set_transform(Transform(translate_x, scale_k))
