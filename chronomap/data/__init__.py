"""
Event data for the timeline engine: event records, the date domain and the
map geography.
"""

from .event_model import Domain, Event, load_events, load_events_json, time_bounds
from .geography import Geography, equirectangular

__all__ = [
    'Domain',
    'Event',
    'load_events',
    'load_events_json',
    'time_bounds',
    'Geography',
    'equirectangular',
]
