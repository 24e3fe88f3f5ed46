"""
Label Layout - Vertical stacking of cluster labels to avoid overlap.
"""

import logging

# Configure logger
logger = logging.getLogger(__name__)

LINE_HEIGHT = 20
OVERLAP_PIXELS = 100


def layout_labels(clusters, line_height=LINE_HEIGHT, overlap_pixels=OVERLAP_PIXELS, sort_by_x=False):
    """
    Assign y offsets so labels of horizontally close clusters do not overlap.

    Clusters are processed in input order. Each one is compared with every
    cluster processed before it; when their centroid_x values are closer
    than overlap_pixels the label is pushed to at least one line below the
    earlier label. Later clusters are never revisited, so the result depends
    on input order.

    Args:
        clusters (list): Clusters with centroid_x; y_offset is updated in place
        line_height (float): Vertical distance between stacked labels
        overlap_pixels (float): Horizontal distance under which labels collide
        sort_by_x (bool): Process clusters in ascending centroid_x order
            instead of input order (the returned list keeps input order)

    Returns:
        list: The same clusters, with y_offset set
    """
    order = sorted(clusters, key=lambda c: c.centroid_x) if sort_by_x else list(clusters)

    processed = []
    for cluster in order:
        for earlier in processed:
            if abs(cluster.centroid_x - earlier.centroid_x) < overlap_pixels:
                cluster.y_offset = max(cluster.y_offset, earlier.y_offset + line_height)
        processed.append(cluster)

    if clusters:
        logger.debug(
            f"Laid out {len(clusters)} labels, "
            f"max offset {max(c.y_offset for c in clusters)}"
        )
    return clusters


def stack_depth(clusters, line_height=LINE_HEIGHT):
    """
    Get the number of label rows used after layout.

    Returns:
        int: 0 for no clusters, otherwise highest row index + 1
    """
    if not clusters:
        return 0
    return int(round(max(c.y_offset for c in clusters) / line_height)) + 1
