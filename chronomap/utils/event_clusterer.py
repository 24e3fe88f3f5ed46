"""
Event Clusterer - Groups events that are close on screen at the current zoom.

This module provides the EventClusterer class which merges events whose
positions under the effective time scale are closer than a zoom-dependent
pixel threshold. On the map view a projection can be supplied, in which case
events must also be close in projected screen space.

The algorithm is a single greedy pass and depends on input order:

1. Every event starts unclaimed.
2. Each unclaimed event, in order, seeds a new cluster.
3. Every other unclaimed event whose pixel distance to the seed is below the
   threshold (and, with a projection, whose projected distance to the seed
   is below the spatial radius) is absorbed in scan order.
4. Centroids are running means updated on each absorption.
"""

import logging
import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, List, Optional, Tuple

from .civil_time import to_datetime
from .error_handler import InvalidThreshold

# Configure logger
logger = logging.getLogger(__name__)

Projection = Callable[[float, float], Tuple[float, float]]


@dataclass
class Cluster:
    """
    A group of one or more events merged at the current zoom.

    Clusters are rebuilt on every recomputation; the first event's date is
    only a display key.

    A cluster always holds at least one event and count equals len(events);
    count may be omitted and is then derived from events.

    Attributes:
        events: Member events in discovery order
        centroid_x: Mean screen x of the members under the effective scale
        centroid_lat: Mean latitude of the members
        centroid_lng: Mean longitude of the members
        count: Number of members
        y_offset: Vertical label offset assigned by the label layout
    """

    events: List
    centroid_x: float = 0.0
    centroid_lat: float = 0.0
    centroid_lng: float = 0.0
    count: Optional[int] = None
    y_offset: float = 0.0

    def __post_init__(self):
        if not self.events:
            raise ValueError("A cluster needs at least one event")
        if self.count is None:
            self.count = len(self.events)
        elif self.count != len(self.events):
            raise ValueError(f"Cluster count {self.count} does not match {len(self.events)} events")

    @classmethod
    def seed(cls, event, x: float) -> 'Cluster':
        """Start a cluster from a single event positioned at x."""
        return cls(events=[event], centroid_x=x, centroid_lat=event.lat,
                   centroid_lng=event.lng, count=1)

    def absorb(self, event, x: float):
        """
        Add an event, updating the running centroid.

        Args:
            event: Event to add
            x (float): Screen position of the event under the effective scale
        """
        count = self.count
        self.centroid_x = (self.centroid_x * count + x) / (count + 1)
        self.centroid_lat = (self.centroid_lat * count + event.lat) / (count + 1)
        self.centroid_lng = (self.centroid_lng * count + event.lng) / (count + 1)
        self.events.append(event)
        self.count = count + 1

    @property
    def key(self):
        """Display key: the first member's date."""
        return self.events[0].date

    @property
    def is_cluster(self) -> bool:
        """True when more than one event was merged."""
        return self.count > 1

    @property
    def start(self) -> float:
        """Earliest member instant in epoch milliseconds."""
        return min(event.time_value for event in self.events)

    @property
    def end(self) -> float:
        """Latest member instant in epoch milliseconds."""
        return max(event.time_value for event in self.events)

    def centroid_time(self, effective_scale) -> float:
        """Instant (epoch milliseconds) at the cluster's centroid_x."""
        return effective_scale.invert(self.centroid_x)

    def centroid_date(self, effective_scale):
        """UTC datetime at the cluster's centroid_x."""
        return to_datetime(self.centroid_time(effective_scale))


def validate_threshold(threshold) -> float:
    """
    Check that a clustering threshold is a positive finite number.

    Raises:
        InvalidThreshold: If it is not
    """
    try:
        value = float(threshold)
    except (TypeError, ValueError):
        raise InvalidThreshold(threshold)
    if not math.isfinite(value) or value <= 0:
        raise InvalidThreshold(threshold)
    return value


def cluster_events(events, effective_scale, threshold, projection: Optional[Projection] = None,
                   spatial_radius: float = 30.0) -> List[Cluster]:
    """
    Greedily cluster events by temporal (and optionally spatial) proximity.

    Args:
        events (list): Events in the order clusters should be discovered
        effective_scale: Scale mapping event dates to screen pixels
        threshold (float): Pixel distance below which events merge
        projection: Optional (lng, lat) -> (x, y) map projection
        spatial_radius (float): Projected distance below which events merge

    Returns:
        list: Clusters in discovery order

    Raises:
        InvalidThreshold: If threshold is not a positive number
    """
    threshold = validate_threshold(threshold)
    events = list(events)
    if not events:
        return []

    positions = [effective_scale(event.time_value) for event in events]
    points = None
    if projection is not None:
        points = [projection(event.lng, event.lat) for event in events]

    claimed = [False] * len(events)
    clusters = []

    for i, event in enumerate(events):
        if claimed[i]:
            continue

        cluster = Cluster.seed(event, positions[i])
        claimed[i] = True

        for j, other in enumerate(events):
            if claimed[j]:
                continue
            if abs(positions[i] - positions[j]) >= threshold:
                continue
            if points is not None:
                dx = points[i][0] - points[j][0]
                dy = points[i][1] - points[j][1]
                if math.hypot(dx, dy) >= spatial_radius:
                    continue
            cluster.absorb(other, positions[j])
            claimed[j] = True

        clusters.append(cluster)

    logger.debug(
        f"Clustered {len(events)} events into {len(clusters)} clusters "
        f"(threshold={threshold:.2f}px, spatial={'yes' if points is not None else 'no'})"
    )
    return clusters


class EventClusterer:
    """
    Zoom-aware event clusterer.

    The pixel threshold shrinks as the zoom grows:
    threshold = max(min_threshold, base_threshold_pixels / scale_k), so
    clusters split apart under magnification.
    """

    BASE_THRESHOLD_PIXELS = 50.0
    MIN_THRESHOLD = 20.0
    SPATIAL_RADIUS = 30.0

    def __init__(self, base_threshold_pixels=BASE_THRESHOLD_PIXELS,
                 min_threshold=MIN_THRESHOLD, spatial_radius=SPATIAL_RADIUS):
        """
        Initialize the event clusterer.

        Args:
            base_threshold_pixels (float): Threshold at scale_k == 1
            min_threshold (float): Lower bound for the threshold
            spatial_radius (float): Projected merge distance on the map
        """
        self.base_threshold_pixels = validate_threshold(base_threshold_pixels)
        self.min_threshold = validate_threshold(min_threshold)
        self.spatial_radius = validate_threshold(spatial_radius)

    def threshold_for_scale(self, scale_k):
        """
        Get the pixel threshold for a zoom level.

        Args:
            scale_k (float): Current transform scale

        Returns:
            float: max(min_threshold, base_threshold_pixels / scale_k)
        """
        return max(self.min_threshold, self.base_threshold_pixels / scale_k)

    def cluster_events(self, events, effective_scale, scale_k=1.0, projection=None, threshold=None):
        """
        Cluster events for the current zoom.

        Args:
            events (list): Visible events
            effective_scale: Scale mapping dates to screen pixels
            scale_k (float): Current transform scale, used for the threshold
            projection: Optional map projection for spatial clustering
            threshold (float): Explicit threshold overriding the zoom rule

        Returns:
            list: Clusters in discovery order
        """
        if threshold is None:
            threshold = self.threshold_for_scale(scale_k)
        return cluster_events(events, effective_scale, threshold,
                              projection=projection, spatial_radius=self.spatial_radius)

    def get_cluster_summary(self, cluster):
        """
        Get a summary string for a cluster.

        Args:
            cluster (Cluster): Cluster to describe

        Returns:
            str: Summary such as '3 events over 2d 4h' or '1 event'
        """
        if cluster is None:
            return "No cluster"

        if cluster.count == 1:
            return "1 event"

        duration = timedelta(milliseconds=cluster.end - cluster.start)
        return f"{cluster.count} events over {self._format_duration(duration)}"

    def _format_duration(self, duration):
        """
        Format a timedelta as a human-readable string.

        Args:
            duration (timedelta): Duration to format

        Returns:
            str: Formatted duration string
        """
        total_seconds = int(duration.total_seconds())

        if total_seconds < 60:
            return f"{total_seconds}s"
        elif total_seconds < 3600:
            minutes, seconds = divmod(total_seconds, 60)
            return f"{minutes}m {seconds}s" if seconds else f"{minutes}m"
        elif total_seconds < 86400:
            hours, remainder = divmod(total_seconds, 3600)
            minutes = remainder // 60
            return f"{hours}h {minutes}m" if minutes else f"{hours}h"
        elif total_seconds < 365 * 86400:
            days, remainder = divmod(total_seconds, 86400)
            hours = remainder // 3600
            return f"{days}d {hours}h" if hours else f"{days}d"
        else:
            years, remainder = divmod(duration.days, 365)
            days = remainder
            return f"{years}y {days}d" if days else f"{years}y"
