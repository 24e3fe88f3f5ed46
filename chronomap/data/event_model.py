"""
Event Model - Immutable event records and the date domain of the timeline.

This module provides the Event and Domain value types consumed by the scale,
clustering and fit-transform code, plus loaders that build events from plain
records (for example a decoded JSON array).

Author: chronomap
Version: 1.0
"""

import datetime
import json
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..utils.civil_time import EARLIEST_MS, now_ms, to_ms
from ..utils.error_handler import InvalidCoordinate, InvalidDomain, InvalidInstant, OutOfRangeInput
from ..utils.timestamp_parser import TimestampParser

# Configure logger
logger = logging.getLogger(__name__)

# Accepted record keys for each event field, in lookup order
LATITUDE_KEYS = ('lat', 'latitude')
LONGITUDE_KEYS = ('lng', 'lon', 'long', 'longitude')


@dataclass(frozen=True)
class Event:
    """
    A dated, geolocated event.

    Events are owned by the caller and never mutated by the engine.

    Attributes:
        date: Timezone-aware UTC datetime of the event
        title: Display title
        lat: Latitude in degrees, within [-90, 90]
        lng: Longitude in degrees, within [-180, 180]
    """

    date: datetime.datetime
    title: str
    lat: float = 0.0
    lng: float = 0.0
    time_value: float = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.date, datetime.datetime):
            raise InvalidInstant(f"Event '{self.title}' has no valid date", self.date)
        try:
            time_value = to_ms(self.date)
        except OutOfRangeInput as e:
            raise InvalidInstant(e.message, self.date)

        lat = float(self.lat)
        lng = float(self.lng)
        if not (math.isfinite(lat) and -90.0 <= lat <= 90.0):
            raise InvalidCoordinate(f"Latitude {self.lat!r} of event '{self.title}' is outside [-90, 90]")
        if not (math.isfinite(lng) and -180.0 <= lng <= 180.0):
            raise InvalidCoordinate(f"Longitude {self.lng!r} of event '{self.title}' is outside [-180, 180]")

        object.__setattr__(self, 'lat', lat)
        object.__setattr__(self, 'lng', lng)
        object.__setattr__(self, 'time_value', time_value)

    @classmethod
    def from_record(cls, record: Dict) -> 'Event':
        """
        Build an event from a plain dictionary.

        Args:
            record: Mapping with a 'date' key, an optional 'title' and
                latitude/longitude under any of the accepted key names

        Returns:
            Event: The parsed event

        Raises:
            InvalidInstant: If the date is missing or unparseable
            InvalidCoordinate: If a coordinate is out of range
        """
        date = TimestampParser.parse_timestamp(record.get('date'))
        lat = _first_present(record, LATITUDE_KEYS, 0.0)
        lng = _first_present(record, LONGITUDE_KEYS, 0.0)
        return cls(date=date, title=str(record.get('title', '')), lat=lat, lng=lng)


def _first_present(record: Dict, keys, default):
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return default


@dataclass(frozen=True)
class Domain:
    """
    Permissible date range for panning and zooming.

    Bounds are stored as epoch milliseconds. Invariant: min < max.
    """

    min: float
    max: float

    def __post_init__(self):
        try:
            lower = to_ms(self.min)
            upper = to_ms(self.max)
        except OutOfRangeInput as e:
            raise InvalidDomain(f"Domain bounds must be finite instants: {e.message}")
        if not lower < upper:
            raise InvalidDomain(f"Domain minimum must be earlier than maximum, got {lower} >= {upper}")
        object.__setattr__(self, 'min', lower)
        object.__setattr__(self, 'max', upper)

    @classmethod
    def default(cls, now: Optional[float] = None) -> 'Domain':
        """
        Get the default domain: earliest representable date to now.

        Args:
            now: Upper bound override (datetime or epoch milliseconds)
        """
        return cls(EARLIEST_MS, now_ms() if now is None else now)

    @property
    def span(self) -> float:
        """Width of the domain in milliseconds."""
        return self.max - self.min

    def contains(self, instant) -> bool:
        """Check whether an instant lies within the domain (inclusive)."""
        value = to_ms(instant)
        return self.min <= value <= self.max


def load_events(records: Iterable[Dict], skip_invalid: bool = False) -> List[Event]:
    """
    Build events from plain records, preserving their order.

    Args:
        records: Iterable of dictionaries (see Event.from_record)
        skip_invalid: Log and drop invalid records instead of raising

    Returns:
        list: Events in input order
    """
    events = []
    for index, record in enumerate(records):
        try:
            events.append(Event.from_record(record))
        except (InvalidInstant, InvalidCoordinate) as e:
            if not skip_invalid:
                raise
            logger.warning(f"Skipping event record {index}: {e.message}")

    logger.debug(f"Loaded {len(events)} events")
    return events


def load_events_json(path, skip_invalid: bool = False) -> List[Event]:
    """
    Load events from a local JSON file holding an array of records.

    Args:
        path: Path to the JSON file
        skip_invalid: Log and drop invalid records instead of raising

    Returns:
        list: Events in file order
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get('events', [])

    return load_events(data, skip_invalid=skip_invalid)


def time_bounds(events: Iterable[Event]):
    """
    Get the earliest and latest instants among events.

    Returns:
        tuple: (min_ms, max_ms) or (None, None) for no events
    """
    values = [event.time_value for event in events]
    if not values:
        return (None, None)
    return (min(values), max(values))
