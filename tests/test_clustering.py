"""Tests for two-pass point cloud clustering."""

from __future__ import annotations

import random

from hudbot.models.geometry import Bounds, Point, PointCloud
from hudbot.models.targets import TargetType
from hudbot.vision.clustering import cluster_cloud, merge_cloud_into_targets


def _blob(x: int, y: int, w: int, h: int) -> list[Point]:
    return [Point(px, py) for px in range(x, x + w) for py in range(y, y + h)]


def _corners(bounds: Bounds) -> list[Point]:
    right = bounds.x + bounds.w - 1
    bottom = bounds.y + bounds.h - 1
    return [
        Point(bounds.x, bounds.y),
        Point(right, bounds.y),
        Point(bounds.x, bottom),
        Point(right, bottom),
    ]


class TestClusterCloud:
    """Tests for the X-then-Y clustering passes."""

    def test_far_apart_blobs_stay_separate(self) -> None:
        """Blobs further apart than the X distance form separate clusters."""
        cloud = PointCloud(_blob(0, 0, 5, 2) + _blob(100, 0, 5, 2))
        assert len(cluster_cloud(cloud)) == 2

    def test_vertical_split_within_x_cluster(self) -> None:
        """Stacked names overlapping in X are split by the Y pass."""
        cloud = PointCloud(_blob(0, 0, 20, 2) + _blob(0, 20, 20, 2))
        clusters = cluster_cloud(cloud)
        assert [c.to_bounds() for c in clusters] == [Bounds(0, 0, 20, 2), Bounds(0, 20, 20, 2)]

    def test_letter_gaps_within_x_distance_merge(self) -> None:
        """Gaps up to 50 px between glyphs stay in one name."""
        cloud = PointCloud(_blob(0, 0, 3, 3) + _blob(52, 0, 3, 3))
        assert len(cluster_cloud(cloud)) == 1

    def test_gap_just_over_x_distance_splits(self) -> None:
        """A 51 px gap starts a new name."""
        cloud = PointCloud(_blob(0, 0, 3, 3) + _blob(53, 0, 3, 3))
        assert len(cluster_cloud(cloud)) == 2


class TestMergeCloudIntoTargets:
    """Tests for merge_cloud_into_targets."""

    def test_output_is_independent_of_input_order(self) -> None:
        """Shuffling the input must not change the targets."""
        points = _blob(10, 10, 15, 3) + _blob(300, 50, 20, 2) + _blob(10, 200, 30, 4)
        expected = merge_cloud_into_targets(PointCloud(points), TargetType.MOB_PASSIVE)

        rng = random.Random(7)
        for _ in range(5):
            shuffled = points[:]
            rng.shuffle(shuffled)
            assert merge_cloud_into_targets(PointCloud(shuffled), TargetType.MOB_PASSIVE) == expected

    def test_output_ordered_by_x_then_y(self) -> None:
        """Targets come out ordered by X cluster, then by Y."""
        points = _blob(300, 5, 12, 2) + _blob(10, 200, 12, 2) + _blob(10, 10, 12, 2)
        targets = merge_cloud_into_targets(PointCloud(points), TargetType.MOB_PASSIVE)
        assert [t.bounds for t in targets] == [
            Bounds(10, 10, 12, 2),
            Bounds(10, 200, 12, 2),
            Bounds(300, 5, 12, 2),
        ]

    def test_reclustering_corners_is_stable(self) -> None:
        """Clustering bounding corners of separated blobs reproduces the bounds."""
        points = _blob(10, 10, 15, 3) + _blob(300, 50, 20, 2) + _blob(10, 200, 30, 4)
        first = merge_cloud_into_targets(PointCloud(points), TargetType.MOB_PASSIVE)

        corners = [corner for target in first for corner in _corners(target.bounds)]
        second = merge_cloud_into_targets(PointCloud(corners), TargetType.MOB_PASSIVE)

        assert [t.bounds for t in second] == [t.bounds for t in first]

    def test_width_filter_is_inclusive(self) -> None:
        """Widths equal to the min or max survive; others are dropped."""
        points = _blob(0, 0, 11, 1) + _blob(100, 0, 10, 1) + _blob(200, 0, 180, 1) + _blob(500, 0, 181, 1)
        targets = merge_cloud_into_targets(
            PointCloud(points),
            TargetType.MOB_PASSIVE,
            max_distance_x=5,
            width_range=(11, 180),
        )
        assert sorted(t.bounds.w for t in targets) == [11, 180]

    def test_every_target_carries_the_category(self) -> None:
        """All targets get the category passed in."""
        targets = merge_cloud_into_targets(PointCloud(_blob(0, 0, 20, 2)), TargetType.MOB_AGGRESSIVE)
        assert [t.target_type for t in targets] == [TargetType.MOB_AGGRESSIVE]

    def test_empty_cloud_gives_no_targets(self) -> None:
        """An empty cloud is a normal, empty result."""
        assert merge_cloud_into_targets(PointCloud(), TargetType.MOB_PASSIVE) == []
