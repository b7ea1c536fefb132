"""Point cloud clustering into rectangular targets.

Two-pass single-link interval clustering: points are first grouped along X,
then each X group is split along Y. Each surviving group collapses to its
bounding rectangle. This is a cheap stand-in for connected-component
labeling that works well on wide, short blobs such as name tags.
"""

from __future__ import annotations

import logging

from hudbot.models.geometry import PointCloud, x_axis, y_axis
from hudbot.models.targets import Target, TargetType

logger = logging.getLogger(__name__)

# Max merge distances for name tag blobs
MAX_DISTANCE_X = 50
MAX_DISTANCE_Y = 3


def cluster_cloud(
    cloud: PointCloud,
    max_distance_x: int = MAX_DISTANCE_X,
    max_distance_y: int = MAX_DISTANCE_Y,
) -> list[PointCloud]:
    """Cluster a cloud along X, then along Y within each X cluster."""
    xy_clusters: list[PointCloud] = []
    for x_cluster in cloud.cluster_by_distance(max_distance_x, x_axis):
        xy_clusters.extend(x_cluster.cluster_by_distance(max_distance_y, y_axis))
    return xy_clusters


def merge_cloud_into_targets(
    cloud: PointCloud,
    target_type: TargetType,
    max_distance_x: int = MAX_DISTANCE_X,
    max_distance_y: int = MAX_DISTANCE_Y,
    width_range: tuple[int, int] | None = None,
) -> list[Target]:
    """Turn a point cloud into targets of one category.

    Args:
        cloud: Points to cluster.
        target_type: Category assigned to every produced target.
        max_distance_x: Merge distance along X.
        max_distance_y: Merge distance along Y.
        width_range: Optional inclusive (min_width, max_width). Clusters
            narrower are likely misclick noise, wider ones are usually
            several overlapping names.

    Returns:
        One target per surviving cluster, ordered by X cluster then Y.
    """
    targets = [
        Target(target_type, cluster.to_bounds())
        for cluster in cluster_cloud(cloud, max_distance_x, max_distance_y)
    ]

    if width_range is not None:
        min_width, max_width = width_range
        kept = [t for t in targets if min_width <= t.bounds.w <= max_width]
        if len(kept) != len(targets):
            logger.debug(
                f"Dropped {len(targets) - len(kept)} {target_type} clusters "
                f"outside width range [{min_width}, {max_width}]"
            )
        targets = kept

    return targets
