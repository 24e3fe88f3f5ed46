"""
Scale, transform and layout computations consumed by renderers.
"""

from .fit_transform import compute_fit_transform, fit_transform, go_to_date_transform, reset_transform
from .label_layout import layout_labels
from .time_axis import axis_ticks, format_tick, tick_values
from .time_scale import TimeScale, make_scale
from .transform import Transform
from .viewport import Viewport
from .viewport_optimizer import ViewportOptimizer, get_visible_events
from .viewport_transform import constrain, rescale, visible_range
from .zoom_manager import ZoomManager

__all__ = [
    'compute_fit_transform',
    'fit_transform',
    'go_to_date_transform',
    'reset_transform',
    'layout_labels',
    'axis_ticks',
    'format_tick',
    'tick_values',
    'TimeScale',
    'make_scale',
    'Transform',
    'Viewport',
    'ViewportOptimizer',
    'get_visible_events',
    'constrain',
    'rescale',
    'visible_range',
    'ZoomManager',
]
