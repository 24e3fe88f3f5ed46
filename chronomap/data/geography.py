"""
Geography - Holder for the map projection used by spatial clustering.

The projection is unset until the renderer has loaded its map data, and
immutable afterwards. It is passed explicitly to the clustering calls that
need it instead of living in a module-level variable.
"""

import logging
from typing import Callable, Optional, Tuple

from ..utils.error_handler import DegenerateViewport, GeographyAlreadyLoaded, GeographyNotLoaded

# Configure logger
logger = logging.getLogger(__name__)

Projection = Callable[[float, float], Tuple[float, float]]


class Geography:
    """
    Load-once container for the map projection.

    Example:
        geography = Geography()
        geography.load(equirectangular(960, 480))
        x, y = geography.project(event.lng, event.lat)
    """

    def __init__(self, projection: Optional[Projection] = None):
        self._projection = None
        if projection is not None:
            self.load(projection)

    @property
    def is_loaded(self) -> bool:
        return self._projection is not None

    @property
    def projection(self) -> Projection:
        """
        Get the loaded projection.

        Raises:
            GeographyNotLoaded: If load() has not been called yet
        """
        if self._projection is None:
            raise GeographyNotLoaded()
        return self._projection

    def load(self, projection: Projection):
        """
        Install the projection. Can only be done once.

        Raises:
            GeographyAlreadyLoaded: If a projection is already installed
        """
        if self._projection is not None:
            raise GeographyAlreadyLoaded()
        if not callable(projection):
            raise TypeError(f"Projection must be callable, got {type(projection).__name__}")
        self._projection = projection
        logger.info("Map geography loaded")

    def project(self, lng: float, lat: float) -> Tuple[float, float]:
        return self.projection(lng, lat)


def equirectangular(width: float, height: float) -> Projection:
    """
    Create a plate carree projection filling a width x height map.

    Longitude -180..180 maps to 0..width and latitude 90..-90 to 0..height.

    Raises:
        DegenerateViewport: If width or height is not positive
    """
    if width <= 0 or height <= 0:
        raise DegenerateViewport(width, height)

    def project(lng: float, lat: float) -> Tuple[float, float]:
        return ((lng + 180.0) / 360.0 * width, (90.0 - lat) / 180.0 * height)

    return project
