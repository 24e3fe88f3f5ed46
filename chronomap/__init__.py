"""
Spatiotemporal Timeline Engine

This package maps dated events onto a pannable, zoomable timeline and a
companion world map. Events that are close at the current zoom are clustered,
cluster labels are stacked to avoid overlap, and transforms are kept inside
the valid date domain.
"""

__version__ = "1.0.0"
__author__ = "chronomap Development Team"

from .config import EngineConfig
from .data.event_model import Domain, Event, load_events
from .data.geography import Geography, equirectangular
from .rendering.transform import Transform
from .timeline_engine import TimelineEngine

__all__ = [
    'EngineConfig',
    'Domain',
    'Event',
    'load_events',
    'Geography',
    'equirectangular',
    'Transform',
    'TimelineEngine',
]
