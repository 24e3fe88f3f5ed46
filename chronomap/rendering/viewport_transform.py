"""
Viewport Transform - Composition of a transform with the base time scale.

This module provides the pure functions used whenever the transform changes:

- rescale: derive the effective scale for a transform
- constrain: keep the visible window inside the date domain
- visible_range: dates shown at the left and right viewport edges
"""

import math

from ..utils.civil_time import to_ms
from ..utils.error_handler import DegenerateViewport
from .time_scale import TimeScale
from .transform import Transform


def _domain_bounds(domain):
    if hasattr(domain, 'min') and hasattr(domain, 'max'):
        return (to_ms(domain.min), to_ms(domain.max))
    return (to_ms(domain[0]), to_ms(domain[1]))


def check_pixel_width(pixel_width: float) -> float:
    """
    Validate a viewport width.

    Raises:
        DegenerateViewport: If the width is not a positive finite number
    """
    try:
        width = float(pixel_width)
    except (TypeError, ValueError):
        raise DegenerateViewport(pixel_width)
    if not (math.isfinite(width) and width > 0):
        raise DegenerateViewport(pixel_width)
    return width


def rescale(transform: Transform, base_scale: TimeScale) -> TimeScale:
    """
    Get the effective scale of a transform.

    The returned scale satisfies
    effective(d) == transform.translate_x + transform.scale_k * base_scale(d).

    Args:
        transform (Transform): Current pan/zoom transform
        base_scale (TimeScale): Scale mapping the full domain onto the viewport

    Returns:
        TimeScale: Effective scale with the same pixel range as base_scale
    """
    r0, r1 = base_scale.range
    domain = (
        base_scale.invert(transform.invert(r0)),
        base_scale.invert(transform.invert(r1)),
    )
    return TimeScale(domain, (r0, r1))


def visible_range(transform: Transform, base_scale: TimeScale, pixel_width: float):
    """
    Get the instants shown at pixel 0 and at pixel_width.

    Returns:
        tuple: (start_ms, end_ms)
    """
    width = check_pixel_width(pixel_width)
    return (
        base_scale.invert(transform.invert(0.0)),
        base_scale.invert(transform.invert(width)),
    )


def constrain(transform: Transform, domain, base_scale: TimeScale, pixel_width: float) -> Transform:
    """
    Shift a transform so the visible window stays inside the domain.

    The left edge is checked first: if it shows a date before domain.min,
    translate_x is set so pixel 0 maps exactly to domain.min. The right edge
    is then checked against the possibly shifted transform: if it shows a
    date after domain.max, translate_x is set so pixel_width maps exactly to
    domain.max. When the visible span is wider than the domain the right edge
    therefore wins. scale_k is never changed.

    The caller is expected to clamp scale_k to the scale extent beforehand.

    Args:
        transform (Transform): Candidate transform
        domain: Domain or (min, max) instants
        base_scale (TimeScale): Base scale of the timeline
        pixel_width (float): Viewport width in pixels

    Returns:
        Transform: The constrained transform (the input itself if unchanged)

    Raises:
        DegenerateViewport: If pixel_width is not positive
    """
    width = check_pixel_width(pixel_width)
    domain_min, domain_max = _domain_bounds(domain)
    k = transform.scale_k
    translate_x = transform.translate_x

    left = base_scale.invert((0.0 - translate_x) / k)
    if left < domain_min:
        translate_x = -k * base_scale(domain_min)

    right = base_scale.invert((width - translate_x) / k)
    if right > domain_max:
        translate_x = width - k * base_scale(domain_max)

    if translate_x == transform.translate_x:
        return transform
    return Transform(translate_x, k)
