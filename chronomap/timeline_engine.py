"""
Timeline Engine - Coordinates pan/zoom intents, clustering and label layout.

This module provides the TimelineEngine class which the renderer drives with
intents (pan, wheel zoom, go to date, zoom to events, reset, resize) and
which publishes the current transform and cluster lists through Qt signals.

Transform updates are synchronous: transform_changed and
visible_range_changed are emitted on every intent. Cluster and label
recomputation for continuous intents (pan, wheel zoom) is debounced per intent
class and always runs with the latest transform. Discrete intents drop any
pending recomputation and recompute immediately.
"""

import logging

from PyQt5.QtCore import QObject, pyqtSignal

from .config import EngineConfig
from .data.event_model import Domain
from .data.geography import Geography
from .rendering.label_layout import layout_labels
from .rendering.time_axis import axis_ticks
from .rendering.viewport import Viewport
from .rendering.viewport_optimizer import ViewportOptimizer
from .rendering.zoom_manager import ZoomManager
from .utils.civil_time import MS_PER_DAY
from .utils.debounce import Debouncer
from .utils.event_clusterer import EventClusterer

# Configure logger
logger = logging.getLogger(__name__)


class TimelineEngine(QObject):
    """
    Spatiotemporal clustering and viewport engine for a timeline and map.

    Signals:
        transform_changed: Emitted with the new Transform after every intent
        visible_range_changed: Emitted with (start_ms, end_ms) after every intent
        timeline_clusters_changed: Emitted with the laid-out timeline clusters
        map_clusters_changed: Emitted with the spatially clustered map clusters
    """

    transform_changed = pyqtSignal(object)
    visible_range_changed = pyqtSignal(float, float)
    timeline_clusters_changed = pyqtSignal(list)
    map_clusters_changed = pyqtSignal(list)

    # Intent classes that are debounced independently
    PAN = 'pan'
    ZOOM = 'zoom'

    def __init__(self, events, pixel_width, domain=None, geography=None, config=None, parent=None):
        """
        Initialize the engine.

        Args:
            events (list): Events to display; never mutated
            pixel_width (float): Width of the timeline in pixels
            domain (Domain): Date range the view may show (default: year 1 to now)
            geography (Geography): Map projection holder, may be loaded later
            config (EngineConfig): Preferences (defaults when omitted)
            parent: Parent QObject

        Raises:
            DegenerateViewport: If pixel_width is not positive
        """
        super().__init__(parent)

        self.config = config or EngineConfig()
        self.events = tuple(events)
        self.domain = domain or Domain.default()
        self.geography = geography or Geography()

        zoom_config = self.config.config['zoom']
        fit_config = self.config.config['fit']
        cluster_config = self.config.config['clustering']
        label_config = self.config.config['labels']

        self.zoom_manager = ZoomManager(
            min_scale=zoom_config['min_scale'],
            max_scale=zoom_config['max_scale'],
            wheel_delta_factor=zoom_config['wheel_delta_factor'],
        )
        self.viewport = Viewport(
            self.domain, pixel_width, self.zoom_manager,
            padding_ratio=fit_config['padding_ratio'],
            min_padding_ms=fit_config['min_padding_days'] * MS_PER_DAY,
            go_to_date_months=zoom_config['go_to_date_months'],
        )
        self.event_clusterer = EventClusterer(
            base_threshold_pixels=cluster_config['base_threshold_pixels'],
            min_threshold=cluster_config['min_threshold'],
            spatial_radius=cluster_config['spatial_radius'],
        )
        self.viewport_optimizer = ViewportOptimizer(self.config.get('viewport', 'buffer_ratio'))

        self.line_height = label_config['line_height']
        self.overlap_pixels = label_config['overlap_pixels']
        self.sort_labels_by_x = label_config['sort_by_x']

        quiescence_ms = self.config.get('debounce', 'quiescence_ms')
        self._debouncers = {
            self.PAN: Debouncer(quiescence_ms, self),
            self.ZOOM: Debouncer(quiescence_ms, self),
        }

        self._timeline_clusters = []
        self._map_clusters = []
        self._recompute_count = 0

        self.recompute()

    # Outputs

    @property
    def transform(self):
        return self.viewport.transform

    @property
    def timeline_clusters(self):
        return list(self._timeline_clusters)

    @property
    def map_clusters(self):
        return list(self._map_clusters)

    @property
    def recompute_count(self):
        """Number of cluster recomputations performed so far."""
        return self._recompute_count

    def effective_scale(self):
        return self.viewport.effective_scale()

    def visible_range(self):
        return self.viewport.visible_range()

    def axis_ticks(self, count=10, now=None):
        """
        Get labelled axis ticks for the current view.

        Returns:
            list: (instant_ms, pixel, label) tuples
        """
        return axis_ticks(self.effective_scale(), count, now)

    def zoom_info(self):
        """Get zoom readout information for the current view."""
        start, end = self.visible_range()
        return self.zoom_manager.get_zoom_info(self.transform, end - start)

    def has_pending_recompute(self):
        return any(debouncer.is_pending for debouncer in self._debouncers.values())

    # Continuous intents

    def pan(self, delta_pixels):
        """Pan the view by delta_pixels; clusters update after quiescence."""
        self.viewport.pan(delta_pixels)
        self._transform_updated()
        self._schedule(self.PAN)

    def wheel_zoom(self, delta_y, pointer_x):
        """Zoom about pointer_x by a wheel delta; clusters update after quiescence."""
        self.viewport.wheel_zoom(delta_y, pointer_x)
        self._transform_updated()
        self._schedule(self.ZOOM)

    # Discrete intents

    def zoom_in(self, pointer_x=None):
        self.viewport.zoom_in(pointer_x)
        self._apply_now()

    def zoom_out(self, pointer_x=None):
        self.viewport.zoom_out(pointer_x)
        self._apply_now()

    def go_to_date(self, date):
        """Frame six months on each side of date."""
        self.viewport.go_to_date(date)
        self._apply_now()

    def zoom_to_events(self, events):
        """
        Frame a subset of events.

        Raises:
            EmptyTargetSet: If events is empty; the view is left unchanged
        """
        self.viewport.zoom_to_events(events)
        self._apply_now()

    def reset_zoom(self):
        """Show the full domain."""
        self.viewport.reset()
        self._apply_now()

    def resize(self, pixel_width):
        """Resize the timeline; the visible start date is kept."""
        self.viewport.resize(pixel_width)
        self._apply_now()

    def set_projection(self, projection):
        """
        Load the map projection once map data is available.

        Raises:
            GeographyAlreadyLoaded: If a projection was already loaded
        """
        self.geography.load(projection)
        self._cancel_pending()
        self.recompute()

    # Recomputation

    def flush_pending(self):
        """
        Run pending debounced recomputations immediately.

        Returns:
            bool: True if anything ran
        """
        ran = False
        for debouncer in self._debouncers.values():
            ran = debouncer.flush() or ran
        return ran

    def recompute(self):
        """
        Recompute visible clusters and label layout from the latest transform.

        Returns:
            list: Timeline clusters
        """
        start, end = self.viewport.visible_range()
        visible = self.viewport_optimizer.get_visible_events(self.events, start, end)
        scale = self.viewport.effective_scale()
        scale_k = self.viewport.transform.scale_k

        timeline_clusters = self.event_clusterer.cluster_events(visible, scale, scale_k)
        layout_labels(timeline_clusters, self.line_height, self.overlap_pixels,
                      sort_by_x=self.sort_labels_by_x)

        map_clusters = []
        if self.geography.is_loaded:
            map_clusters = self.event_clusterer.cluster_events(
                visible, scale, scale_k, projection=self.geography.projection
            )

        self._timeline_clusters = timeline_clusters
        self._map_clusters = map_clusters
        self._recompute_count += 1

        logger.debug(
            f"Recomputed clusters: {len(visible)} visible events, "
            f"{len(timeline_clusters)} timeline clusters, {len(map_clusters)} map clusters"
        )

        self.timeline_clusters_changed.emit(self.timeline_clusters)
        self.map_clusters_changed.emit(self.map_clusters)
        return self.timeline_clusters

    def _schedule(self, intent_class):
        self._debouncers[intent_class].schedule(self.recompute)

    def _cancel_pending(self):
        for debouncer in self._debouncers.values():
            debouncer.cancel()

    def _apply_now(self):
        self._transform_updated()
        self._cancel_pending()
        self.recompute()

    def _transform_updated(self):
        start, end = self.viewport.visible_range()
        self.transform_changed.emit(self.viewport.transform)
        self.visible_range_changed.emit(start, end)
