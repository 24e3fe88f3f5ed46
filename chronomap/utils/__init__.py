"""
Utility functions and helpers for the timeline engine.
Includes error handling, civil time conversion, timestamp parsing,
clustering, debouncing and hit testing.
"""

from .error_handler import (
    DegenerateViewport,
    EmptyTargetSet,
    ErrorHandler,
    ErrorSeverity,
    GeographyAlreadyLoaded,
    GeographyNotLoaded,
    InvalidCoordinate,
    InvalidDomain,
    InvalidInstant,
    InvalidThreshold,
    InvalidTransform,
    OutOfRangeInput,
    TimelineError,
    setup_logging,
)
from .event_clusterer import Cluster, EventClusterer, cluster_events

__all__ = [
    'DegenerateViewport',
    'EmptyTargetSet',
    'ErrorHandler',
    'ErrorSeverity',
    'GeographyAlreadyLoaded',
    'GeographyNotLoaded',
    'InvalidCoordinate',
    'InvalidDomain',
    'InvalidInstant',
    'InvalidThreshold',
    'InvalidTransform',
    'OutOfRangeInput',
    'TimelineError',
    'setup_logging',
    'Cluster',
    'EventClusterer',
    'cluster_events',
]
