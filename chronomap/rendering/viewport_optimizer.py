"""
Viewport Optimizer - Restricts clustering to the events inside the viewport.

Clustering is quadratic in the number of events, so only the events whose
dates fall inside the visible window (plus an optional buffer) are clustered.
"""

import logging

from ..utils.civil_time import to_ms

# Configure logger
logger = logging.getLogger(__name__)


class ViewportOptimizer:
    """
    Date-range culling of events for the current viewport.

    Keeps simple statistics about the last culling pass for diagnostics.
    """

    # Viewport buffer (fraction of the visible span kept on each side)
    VIEWPORT_BUFFER = 0.0

    def __init__(self, buffer_ratio=VIEWPORT_BUFFER):
        """
        Initialize the viewport optimizer.

        Args:
            buffer_ratio (float): Fraction of the visible span added on each side
        """
        if buffer_ratio < 0:
            raise ValueError(f"Viewport buffer must not be negative, got {buffer_ratio}")
        self.buffer_ratio = buffer_ratio
        self.last_total = 0
        self.last_visible = 0

    def get_visible_events(self, events, start, end):
        """
        Filter events to those inside [start, end] widened by the buffer.

        Input order is preserved. An empty result is valid.

        Args:
            events (list): Events with a time_value attribute
            start: Window start (datetime or epoch milliseconds)
            end: Window end (datetime or epoch milliseconds)

        Returns:
            list: Visible events in input order
        """
        start_ms, end_ms = to_ms(start), to_ms(end)
        if end_ms < start_ms:
            start_ms, end_ms = end_ms, start_ms

        buffer_ms = (end_ms - start_ms) * self.buffer_ratio
        visible_start = start_ms - buffer_ms
        visible_end = end_ms + buffer_ms

        visible_events = [
            event for event in events
            if visible_start <= event.time_value <= visible_end
        ]

        self.last_total = len(events)
        self.last_visible = len(visible_events)
        return visible_events

    def get_culling_stats(self):
        """
        Get statistics of the last culling pass.

        Returns:
            dict: 'total_events', 'visible_events' and 'culled_percent'
        """
        culled = self.last_total - self.last_visible
        culled_percent = (culled / self.last_total * 100) if self.last_total > 0 else 0
        return {
            'total_events': self.last_total,
            'visible_events': self.last_visible,
            'culled_percent': culled_percent,
        }


def get_visible_events(events, start, end, buffer_ratio=0.0):
    """Filter events to a date window; see ViewportOptimizer.get_visible_events."""
    return ViewportOptimizer(buffer_ratio).get_visible_events(events, start, end)
