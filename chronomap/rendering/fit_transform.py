"""
Fit Transform - Transforms that frame a set of events or reset the view.

Fitting pads the target date range on both sides (20% of the span, at least
30 days), centers the padded range in the viewport and passes the result
through constrain() so a fit request never shows dates outside the domain.
"""

import logging

from ..utils.civil_time import MS_PER_DAY, add_months, to_ms
from ..utils.error_handler import EmptyTargetSet
from .transform import Transform
from .viewport_transform import check_pixel_width, constrain

# Configure logger
logger = logging.getLogger(__name__)

PADDING_RATIO = 0.2
MIN_PADDING_MS = 30 * MS_PER_DAY
GO_TO_DATE_MONTHS = 6


def _event_instant(event):
    value = getattr(event, 'time_value', None)
    if value is None:
        return to_ms(event)
    return value


def compute_fit_transform(target_events, base_scale, pixel_width,
                          padding_ratio=PADDING_RATIO, min_padding_ms=MIN_PADDING_MS,
                          scale_extent=None):
    """
    Compute the transform that frames target_events, before constraining.

    The midpoint of the earliest and latest event maps to the horizontal
    center of the viewport.

    Args:
        target_events: Events (or instants) to frame
        base_scale (TimeScale): Base scale of the timeline
        pixel_width (float): Viewport width in pixels
        padding_ratio (float): Padding as a fraction of the target span
        min_padding_ms (float): Lower bound for the padding on each side
        scale_extent (tuple): Optional (min, max) clamp applied to the scale
            before the translation is derived

    Returns:
        Transform: Unconstrained fit transform

    Raises:
        EmptyTargetSet: If target_events is empty
        DegenerateViewport: If pixel_width is not positive
    """
    width = check_pixel_width(pixel_width)
    instants = [_event_instant(event) for event in target_events]
    if not instants:
        raise EmptyTargetSet()

    min_date = min(instants)
    max_date = max(instants)
    center_date = (min_date + max_date) / 2.0
    padding = max(padding_ratio * (max_date - min_date), min_padding_ms)

    padded_span = base_scale(max_date + padding) - base_scale(min_date - padding)
    scale_k = width / padded_span
    if scale_extent is not None:
        scale_k = min(scale_extent[1], max(scale_extent[0], scale_k))

    translate_x = width / 2.0 - base_scale(center_date) * scale_k
    return Transform(translate_x, scale_k)


def fit_transform(target_events, domain, base_scale, pixel_width, **kwargs):
    """
    Compute a domain-constrained transform framing target_events.

    Accepts the same keyword arguments as compute_fit_transform().

    Returns:
        Transform: Fit transform passed through constrain()
    """
    target_events = list(target_events)
    transform = compute_fit_transform(target_events, base_scale, pixel_width, **kwargs)
    logger.debug(f"Fit transform for {len(target_events)} events: {transform}")
    return constrain(transform, domain, base_scale, pixel_width)


def reset_transform(domain, base_scale, pixel_width):
    """
    Get the identity transform, constrained to the domain.

    Returns:
        Transform: Reset transform
    """
    return constrain(Transform.identity(), domain, base_scale, pixel_width)


def go_to_date_transform(date, domain, base_scale, pixel_width,
                         months=GO_TO_DATE_MONTHS, scale_extent=None):
    """
    Frame a window of +/- months calendar months around a date.

    Args:
        date: Target instant (datetime or epoch milliseconds)
        domain: Domain the result is constrained to
        base_scale (TimeScale): Base scale of the timeline
        pixel_width (float): Viewport width in pixels
        months (int): Half-width of the window in calendar months
        scale_extent (tuple): Optional (min, max) scale clamp

    Returns:
        Transform: Constrained transform centered on date
    """
    width = check_pixel_width(pixel_width)
    center = to_ms(date)
    start = add_months(center, -months)
    end = add_months(center, months)

    scale_k = width / (base_scale(end) - base_scale(start))
    if scale_extent is not None:
        scale_k = min(scale_extent[1], max(scale_extent[0], scale_k))
    translate_x = width / 2.0 - base_scale(center) * scale_k

    return constrain(Transform(translate_x, scale_k), domain, base_scale, width)
