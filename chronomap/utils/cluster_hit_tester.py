"""
Cluster Hit Tester - Finds the cluster under the pointer for tooltips.

The renderer forwards pointer movement here and listens to
hovered_cluster_changed, which fires only when the cluster under the pointer
actually changes (including to None when the pointer leaves every cluster).
"""

from PyQt5.QtCore import QObject, pyqtSignal

from .civil_time import to_datetime
from .event_clusterer import EventClusterer
from .error_handler import OutOfRangeInput


class ClusterHitTester(QObject):
    """
    Hit testing over the current cluster list.

    A cluster is hit when the pointer is within hit_radius pixels of its
    centroid_x and, if a y coordinate is given, inside its label row
    [y_offset, y_offset + line_height). The nearest centroid wins.

    Signals:
        hovered_cluster_changed: Emitted with the new cluster or None
    """

    hovered_cluster_changed = pyqtSignal(object)

    HIT_RADIUS = 10.0
    LINE_HEIGHT = 20.0
    MAX_TOOLTIP_TITLES = 5

    def __init__(self, hit_radius=HIT_RADIUS, line_height=LINE_HEIGHT, parent=None):
        super().__init__(parent)
        self.hit_radius = hit_radius
        self.line_height = line_height
        self._clusters = []
        self._hovered = None
        self._summarizer = EventClusterer()

    @property
    def hovered_cluster(self):
        return self._hovered

    def set_clusters(self, clusters):
        """
        Replace the cluster list after a recomputation.

        The hovered cluster is cleared since cluster objects are rebuilt
        on every recomputation.
        """
        self._clusters = list(clusters)
        self._set_hovered(None)

    def cluster_at(self, x, y=None):
        """
        Get the cluster under a pointer position.

        Args:
            x (float): Pointer x in timeline pixels
            y (float): Optional pointer y relative to the label baseline

        Returns:
            Cluster or None
        """
        best = None
        best_distance = None
        for cluster in self._clusters:
            distance = abs(cluster.centroid_x - x)
            if distance > self.hit_radius:
                continue
            if y is not None and not (cluster.y_offset <= y < cluster.y_offset + self.line_height):
                continue
            if best is None or distance < best_distance:
                best = cluster
                best_distance = distance
        return best

    def pointer_moved(self, x, y=None):
        """Update the hovered cluster for a pointer move."""
        self._set_hovered(self.cluster_at(x, y))
        return self._hovered

    def pointer_left(self):
        """Clear the hovered cluster when the pointer leaves the view."""
        self._set_hovered(None)

    def _set_hovered(self, cluster):
        if cluster is self._hovered:
            return
        self._hovered = cluster
        self.hovered_cluster_changed.emit(cluster)

    def tooltip_text(self, cluster):
        """
        Build plain tooltip text for a cluster.

        Returns:
            str: Summary line followed by up to MAX_TOOLTIP_TITLES titles
        """
        if cluster is None:
            return ""

        lines = [self._summarizer.get_cluster_summary(cluster)]
        for event in cluster.events[:self.MAX_TOOLTIP_TITLES]:
            lines.append(f"{_format_date(event.time_value)}  {event.title}")

        remaining = cluster.count - self.MAX_TOOLTIP_TITLES
        if remaining > 0:
            lines.append(f"... and {remaining} more")
        return "\n".join(lines)


def _format_date(ms):
    try:
        return to_datetime(ms).strftime('%Y-%m-%d')
    except OutOfRangeInput:
        return "?"
